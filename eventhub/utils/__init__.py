"""Utility helpers shared by the web front end and the command-line tool."""
