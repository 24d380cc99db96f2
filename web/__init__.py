"""
web — server-rendered connector pages.
"""
