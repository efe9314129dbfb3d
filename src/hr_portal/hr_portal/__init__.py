"""HR Portal package.

Organized by feature modules (interviews, pto, attendance, ...) with a thin
Flask controller layer over service and repository layers. The interview
and PTO overlap checks live in ``conflicts``.
"""
