"""
Application Layer

Orchestrates domain objects through ports that the infrastructure layer
implements.
"""
