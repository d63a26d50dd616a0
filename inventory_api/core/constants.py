DEFAULT_ROLE = "user"

IN_STOCK = "in-stock"
LOW_STOCK = "low-stock"
OUT_OF_STOCK = "out-of-stock"

QUANTITY_OPERATIONS = ("set", "add", "subtract")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

DEFAULT_CATEGORY = "uncategorized"
DEFAULT_UNIT = "unit"

GENERIC_LOGIN_ERROR = "Email or password is incorrect"

# SQLite INTEGER is a signed 64-bit value; ids and offsets must fit in it.
MAX_DB_INTEGER = 2**63 - 1
MAX_PAGE = MAX_DB_INTEGER // MAX_PAGE_SIZE
