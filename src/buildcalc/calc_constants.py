"""
Shared constants for the calculator: token table, node tags and limits.

Exports:
    - token_hashmap: Maps operator symbols and keywords to canonical token types.
    - KEYWORDS: Reserved words that cannot be used as identifiers.
    - NODE_TAGS / TAG_KINDS: Stable integer tags used to serialize expression nodes.
    - UNARY_KINDS / BINARY_KINDS: Node kinds grouped by arity.
    - OPERATOR_SYMBOLS: Canonical rendering symbol for each operator kind.
    - PRECEDENCE: Binding strength of each node kind, used by the printer.
    - MAX_CALL_DEPTH / MAX_DEFINITIONS: Default calculator limits.
    - RECURSION_FRAMES_PER_CALL: Interpreter stack headroom per nested call.
"""

MAX_CALL_DEPTH = 256
MAX_DEFINITIONS = 100

# Interpreter frames reserved per nested function call while evaluating
RECURSION_FRAMES_PER_CALL = 24

LAST_RESULT_VARIABLE = "_"

token_hashmap: dict[str, str] = {
    "+": "PLUS",
    "-": "SUB",
    "*": "MULT",
    "/": "DIV",
    "%": "MOD",
    "^": "POW",
    "!": "NOT",
    "&": "AND",
    "|": "OR",
    "==": "EQ",
    "!=": "NE",
    "<": "LT",
    "<=": "LE",
    ">": "GT",
    ">=": "GE",
    "=": "ASSIGN",
    "(": "LPAREN",
    ")": "RPAREN",
    ",": "COMMA",
    "del": "DELETE",
}

KEYWORDS: frozenset[str] = frozenset(k for k in token_hashmap if k.isidentifier())

NODE_TAGS: dict[str, int] = {
    "number": 0,
    "variable": 1,
    "call": 2,
    "neg": 300,
    "not": 301,
    "add": 400,
    "sub": 401,
    "mul": 402,
    "div": 403,
    "mod": 404,
    "pow": 405,
    "and": 406,
    "or": 407,
    "eq": 408,
    "ne": 409,
    "gt": 410,
    "ge": 411,
    "lt": 412,
    "le": 413,
}

TAG_KINDS: dict[int, str] = {tag: kind for kind, tag in NODE_TAGS.items()}

UNARY_KINDS: frozenset[str] = frozenset({"neg", "not"})

BINARY_KINDS: frozenset[str] = frozenset(
    {
        "add",
        "sub",
        "mul",
        "div",
        "mod",
        "pow",
        "and",
        "or",
        "eq",
        "ne",
        "gt",
        "ge",
        "lt",
        "le",
    }
)

# Token type -> node kind, for the parser
UNARY_TOKEN_KINDS: dict[str, str] = {"SUB": "neg", "NOT": "not"}

BINARY_TOKEN_KINDS: dict[str, str] = {
    "PLUS": "add",
    "SUB": "sub",
    "MULT": "mul",
    "DIV": "div",
    "MOD": "mod",
    "POW": "pow",
    "AND": "and",
    "OR": "or",
    "EQ": "eq",
    "NE": "ne",
    "GT": "gt",
    "GE": "ge",
    "LT": "lt",
    "LE": "le",
}

OPERATOR_SYMBOLS: dict[str, str] = {
    "neg": "-",
    "not": "!",
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
    "mod": "%",
    "pow": "^",
    "and": "&",
    "or": "|",
    "eq": "==",
    "ne": "!=",
    "gt": ">",
    "ge": ">=",
    "lt": "<",
    "le": "<=",
}

PRECEDENCE: dict[str, int] = {
    "or": 1,
    "and": 2,
    "eq": 3,
    "ne": 3,
    "gt": 3,
    "ge": 3,
    "lt": 3,
    "le": 3,
    "add": 4,
    "sub": 4,
    "mul": 5,
    "div": 5,
    "mod": 5,
    "pow": 6,
    "neg": 7,
    "not": 7,
    "number": 8,
    "variable": 8,
    "call": 8,
}

RIGHT_ASSOCIATIVE: frozenset[str] = frozenset({"pow"})

# Tagged-structure keys
NODE_ID_KEY = "NodeID"
VALUE_KEY = "Value"
NAME_KEY = "Name"
OPERANDS_KEY = "Operands"
OPERAND_KEY = "Operand"
LEFT_KEY = "Left"
RIGHT_KEY = "Right"
PARAMETERS_KEY = "Parameters"
NODE_KEY = "Node"
VARIABLES_KEY = "Variables"
FUNCTIONS_KEY = "Functions"
GLOBAL_DATA_KEY = "GlobalData"
PLAYERS_DATA_KEY = "PlayersData"
UUID_KEY = "UUID"
PLAYER_DATA_KEY = "PlayerData"
