"""
Utility Modules for tts-web.

    - timeit.py: Performance measurement
"""
