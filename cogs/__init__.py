"""
Cogs Package - Discord Bot Feature Modules
=========================================

Each cog is a self-contained package loaded by bot.py.

Available Cogs:
- respond: AI responses drafted from recent channel history via OpenRouter
- error_handler: Error handling and exception management
"""

__all__ = [
    'respond',
    'error_handler',
]

__version__ = '1.0.0'
