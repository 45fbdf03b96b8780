"""Keep AI assistant commands in sync across Claude Code, Cursor and Windsurf."""

__version__ = "1.0.0"
