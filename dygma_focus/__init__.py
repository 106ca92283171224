"""
Client for the Focus serial protocol of Dygma keyboards.

Discovers Defy, Raise and Raise 2 keyboards over USB serial, and reads or
writes their keymaps, LED, Superkeys, mouse and wireless settings.
"""

__version__ = "1.0.0"
