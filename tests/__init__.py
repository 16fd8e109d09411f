"""
Test Suite Initialization

agentrun test package.
"""
