"""precompile tests"""
