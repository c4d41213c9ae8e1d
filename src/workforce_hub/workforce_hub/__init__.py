"""Workforce Hub package.

Organized by feature modules (users, projects, tasks, attendance, leave,
expenses, ...) with a thin Flask JSON controller layer on top of
service/repository layers. Every service consults the `access` module
before touching records.
"""
