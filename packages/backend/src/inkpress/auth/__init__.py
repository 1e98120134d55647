"""Authentication.

Learn: Users sign up or log in with email/password and get back a
JWT. Every protected request carries it as "Authorization: Bearer ...".
The gate in dependencies.py verifies it and resolves a CurrentIdentity
that the post handlers use as their ownership filter.
"""
