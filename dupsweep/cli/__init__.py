"""
dupsweep command line interface
"""
