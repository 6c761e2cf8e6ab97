"""
Pydantic schemas for service results and HTTP contracts.

Dependencies: pydantic
System role: Typed data transfer objects
"""
