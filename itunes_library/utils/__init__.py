"""
File reading helpers for the iTunes library reader
"""
