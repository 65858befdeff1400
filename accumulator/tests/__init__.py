"""accumulator tests"""
