"""
Client for the agent reporting service.
"""
