"""Parameterized SQL for the phone_brand table."""

# Highest percentage first; ties keep insertion order
LIST_BRANDS = """
SELECT id, name, percentage
FROM phone_brand
ORDER BY percentage DESC, id ASC
"""

INSERT_BRAND = """
INSERT INTO phone_brand (name, percentage)
VALUES ($1, $2)
RETURNING id, name, percentage
"""

# NULL parameters keep the stored value
UPDATE_BRAND = """
UPDATE phone_brand
SET name = COALESCE($2, name),
    percentage = COALESCE($3, percentage),
    updated_at = NOW()
WHERE id = $1
RETURNING id, name, percentage
"""

DELETE_BRAND = "DELETE FROM phone_brand WHERE id = $1"
