"""Gide Coding Agent - agent-request orchestration backend for the Gide editor"""

__version__ = "1.0.0"
