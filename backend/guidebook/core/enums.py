"""Enum definitions shared across the Guidebook platform."""

from enum import Enum


class RoleName(str, Enum):
    """
    Capability tags attached to users.

    The scheduling engine only ever asks for EMPLOYEE; the check happens once,
    in the employee directory query.
    """

    ADMIN = "admin"
    EMPLOYEE = "employee"
    CUSTOMER = "customer"
