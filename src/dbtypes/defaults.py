"""
Shared defaults used by the type converters of every provider.
"""

DEFAULT_STRING_LENGTH = 255
DEFAULT_BINARY_LENGTH = 255
DEFAULT_DECIMAL_PRECISION = 16
DEFAULT_DECIMAL_SCALE = 4
DEFAULT_ENUM_LENGTH = 128
GUID_STRING_LENGTH = 36

# Sentinel length meaning "max" / unbounded storage
MAX_LENGTH = -1

# Money types are rendered without parameters but carry these implied sizes
SQLSERVER_MONEY_PRECISION = 19
SQLSERVER_MONEY_SCALE = 4
SQLSERVER_SMALLMONEY_PRECISION = 10
SQLSERVER_SMALLMONEY_SCALE = 4
POSTGRES_MONEY_PRECISION = 19
POSTGRES_MONEY_SCALE = 2
