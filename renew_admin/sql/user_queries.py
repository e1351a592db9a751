"""Parameterized SQL for the app_user table."""

GET_USER_BY_ID = """
SELECT id, username, password_hash, role
FROM app_user
WHERE id = $1
"""

GET_USER_BY_USERNAME = """
SELECT id, username, password_hash, role
FROM app_user
WHERE username = $1
"""

INSERT_USER = """
INSERT INTO app_user (username, password_hash, role)
VALUES ($1, $2, $3)
RETURNING id, username, password_hash, role
"""

DELETE_USER_BY_USERNAME = "DELETE FROM app_user WHERE username = $1"
