"""Attendance Ledger package.

Organized by feature modules (employees, attendance, reports, ...) with a
thin Flask controller layer over service/repository layers. The ledger
accumulates worked time per employee and calendar day across clock-in and
clock-out cycles.
"""
