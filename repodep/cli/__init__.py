"""Command-line interface for repodep"""
