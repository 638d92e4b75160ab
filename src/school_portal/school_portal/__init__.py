"""School Portal package.

This package is organized by feature modules (users, classes, attendance,
homework, substitutions, ...) with a thin Flask controller layer over
service/repository layers backed by Firestore.
"""
