"""HRM Portal package.

This package is organized by feature modules (users, leave, payroll,
attendance, ...) with a thin Flask controller layer on top of
service/repository layers backed by MongoDB.
"""
