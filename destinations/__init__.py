"""
destinations — destination collections that connectors write into.
"""
