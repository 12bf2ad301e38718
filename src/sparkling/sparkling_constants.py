"""
Shared lexical and syntactic tables for the Sparkling front end.

Contents:
    token_hashmap:
        Maps every fixed lexeme (operators, punctuation and keywords) to its
        canonical token type. Used by the lexer for longest-match operator
        recognition and keyword reservation.
    keyword_tokens:
        The subset of `token_hashmap` that consists of reserved words.
    literal_tokens:
        Token types that carry a literal payload (INT, FLOAT, STRING, IDENT).
    NODE_KINDS:
        Every AST node tag the parser (or a downstream pass) may use.
    ASSIGNMENT_OPS, CONCAT_OPS, ... MULTIPLICATIVE_OPS:
        Token type -> node kind tables for each binary precedence level,
        listed from lowest to highest precedence in `BINARY_LEVELS`.
    PREFIX_OPS, POSTFIX_OPS:
        Token type -> node kind tables for unary operators.
"""

token_hashmap: dict[str, str] = {
    # punctuation and structure
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACKET",
    "]": "RBRACKET",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ";": "SEMICOLON",
    ":": "COLON",
    "?": "QMARK",
    ".": "DOT",
    "->": "ARROW",
    "..": "DOTDOT",
    # arithmetic
    "+": "PLUS",
    "-": "MINUS",
    "*": "MUL",
    "/": "DIV",
    "%": "MOD",
    # bitwise
    "&": "BITAND",
    "|": "BITOR",
    "^": "XOR",
    "~": "BITNOT",
    "<<": "SHL",
    ">>": "SHR",
    # comparison
    "==": "EQUAL",
    "!=": "NOTEQ",
    "<": "LESS",
    ">": "GREATER",
    "<=": "LEQ",
    ">=": "GEQ",
    # logical
    "&&": "LOGAND",
    "||": "LOGOR",
    "!": "LOGNOT",
    # increment and decrement
    "++": "INCR",
    "--": "DECR",
    # unary word operators
    "sizeof": "SIZEOF",
    "typeof": "TYPEOF",
    "#": "HASH",
    # assignment
    "=": "ASSIGN",
    "+=": "PLUSEQ",
    "-=": "MINUSEQ",
    "*=": "MULEQ",
    "/=": "DIVEQ",
    "%=": "MODEQ",
    "&=": "ANDEQ",
    "|=": "OREQ",
    "^=": "XOREQ",
    "<<=": "SHLEQ",
    ">>=": "SHREQ",
    "..=": "DOTDOTEQ",
    # keywords
    "if": "IF",
    "else": "ELSE",
    "while": "WHILE",
    "do": "DO",
    "for": "FOR",
    "foreach": "FOREACH",
    "as": "AS",
    "in": "IN",
    "break": "BREAK",
    "continue": "CONTINUE",
    "return": "RETURN",
    "function": "FUNCTION",
    "var": "VAR",
    "true": "TRUE",
    "false": "FALSE",
    "nil": "NIL",
    "nan": "NAN",
}

keyword_tokens: dict[str, str] = {
    lexeme: tok for lexeme, tok in token_hashmap.items() if lexeme.isidentifier()
}

operator_lexemes: dict[str, str] = {
    lexeme: tok for lexeme, tok in token_hashmap.items() if lexeme not in keyword_tokens
}

# longest operator lexeme, bounds the lookahead of the operator matcher
MAX_OPERATOR_LENGTH: int = max(len(lexeme) for lexeme in operator_lexemes)

literal_tokens: frozenset[str] = frozenset({"INT", "FLOAT", "STRING", "IDENT"})

TOKEN_TYPES: frozenset[str] = frozenset(token_hashmap.values()) | literal_tokens | {
    "EOF"
}

# reverse lookup used by diagnostics and the source emitter
token_lexemes: dict[str, str] = {tok: lexeme for lexeme, tok in token_hashmap.items()}


STRUCTURAL_NODES: tuple[str, ...] = (
    "PROGRAM",
    "BLOCK",
    "COMPOUND",
    "EMPTY",
    "BRANCHES",
    "FORHEADER",
    "CALLARGS",
    "DECLARGS",
    "VARDECL",
)

STATEMENT_NODES: tuple[str, ...] = (
    "IF",
    "WHILE",
    "DO",
    "FOR",
    "FOREACH",
    "BREAK",
    "CONTINUE",
    "RETURN",
    "FUNCSTMT",
    "FUNCEXPR",
)

# Binary precedence levels, lowest first. Each maps token type -> node kind.
ASSIGNMENT_OPS: dict[str, str] = {
    "ASSIGN": "ASSIGN",
    "PLUSEQ": "ASSIGN_ADD",
    "MINUSEQ": "ASSIGN_SUB",
    "MULEQ": "ASSIGN_MUL",
    "DIVEQ": "ASSIGN_DIV",
    "MODEQ": "ASSIGN_MOD",
    "ANDEQ": "ASSIGN_AND",
    "OREQ": "ASSIGN_OR",
    "XOREQ": "ASSIGN_XOR",
    "SHLEQ": "ASSIGN_SHL",
    "SHREQ": "ASSIGN_SHR",
    "DOTDOTEQ": "ASSIGN_CONCAT",
}
CONCAT_OPS: dict[str, str] = {"DOTDOT": "CONCAT"}
LOGICAL_OR_OPS: dict[str, str] = {"LOGOR": "LOGOR"}
LOGICAL_AND_OPS: dict[str, str] = {"LOGAND": "LOGAND"}
COMPARISON_OPS: dict[str, str] = {
    "EQUAL": "EQUAL",
    "NOTEQ": "NOTEQ",
    "LESS": "LESS",
    "GREATER": "GREATER",
    "LEQ": "LEQ",
    "GEQ": "GEQ",
}
BITWISE_OR_OPS: dict[str, str] = {"BITOR": "BITOR"}
BITWISE_XOR_OPS: dict[str, str] = {"XOR": "BITXOR"}
BITWISE_AND_OPS: dict[str, str] = {"BITAND": "BITAND"}
SHIFT_OPS: dict[str, str] = {"SHL": "SHL", "SHR": "SHR"}
ADDITIVE_OPS: dict[str, str] = {"PLUS": "ADD", "MINUS": "SUB"}
MULTIPLICATIVE_OPS: dict[str, str] = {"MUL": "MUL", "DIV": "DIV", "MOD": "MOD"}

# the conditional operator sits between CONCAT_OPS and LOGICAL_OR_OPS
BINARY_LEVELS: tuple[dict[str, str], ...] = (
    ASSIGNMENT_OPS,
    CONCAT_OPS,
    LOGICAL_OR_OPS,
    LOGICAL_AND_OPS,
    COMPARISON_OPS,
    BITWISE_OR_OPS,
    BITWISE_XOR_OPS,
    BITWISE_AND_OPS,
    SHIFT_OPS,
    ADDITIVE_OPS,
    MULTIPLICATIVE_OPS,
)

PREFIX_OPS: dict[str, str] = {
    "INCR": "PREINCRMT",
    "DECR": "PREDECRMT",
    "PLUS": "UNPLUS",
    "MINUS": "UNMINUS",
    "LOGNOT": "LOGNOT",
    "BITNOT": "BITNOT",
    "SIZEOF": "SIZEOF",
    "TYPEOF": "TYPEOF",
    "HASH": "NTHARG",
}

POSTFIX_OPS: dict[str, str] = {
    "INCR": "POSTINCRMT",
    "DECR": "POSTDECRMT",
    "LBRACKET": "ARRSUB",
    "LPAREN": "FUNCCALL",
    "DOT": "MEMBEROF",
    "ARROW": "MEMBEROF",
}

BINARY_NODES: tuple[str, ...] = tuple(
    kind for level in BINARY_LEVELS for kind in level.values()
) + ("CONDEXPR",)

PREFIX_NODES: tuple[str, ...] = tuple(PREFIX_OPS.values())

PRIMARY_NODES: tuple[str, ...] = (
    "POSTINCRMT",
    "POSTDECRMT",
    "ARRSUB",
    "FUNCCALL",
    "MEMBEROF",
    "IDENT",
    "LITERAL",
)

NODE_KINDS: frozenset[str] = frozenset(
    STRUCTURAL_NODES + STATEMENT_NODES + BINARY_NODES + PREFIX_NODES + PRIMARY_NODES
)

ERRMSG_PREFIX: str = "Sparkling: syntax error near line {line}: "

__all__ = [
    "ADDITIVE_OPS",
    "ASSIGNMENT_OPS",
    "BINARY_LEVELS",
    "BINARY_NODES",
    "BITWISE_AND_OPS",
    "BITWISE_OR_OPS",
    "BITWISE_XOR_OPS",
    "COMPARISON_OPS",
    "CONCAT_OPS",
    "ERRMSG_PREFIX",
    "LOGICAL_AND_OPS",
    "LOGICAL_OR_OPS",
    "MAX_OPERATOR_LENGTH",
    "MULTIPLICATIVE_OPS",
    "NODE_KINDS",
    "POSTFIX_OPS",
    "PREFIX_NODES",
    "PREFIX_OPS",
    "PRIMARY_NODES",
    "SHIFT_OPS",
    "STATEMENT_NODES",
    "STRUCTURAL_NODES",
    "TOKEN_TYPES",
    "keyword_tokens",
    "literal_tokens",
    "operator_lexemes",
    "token_hashmap",
    "token_lexemes",
]
