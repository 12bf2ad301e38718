"""
Interactive read-parse-print loop for Sparkling.

Each entry is parsed as a complete program and its tree is printed in the
current output format. Input continues on `... ` prompts while braces are
unbalanced.

Commands:
    :format NAME    switch the output format (sexpr, source, json)
    :help           list commands
    exit, quit      leave the REPL (EOF and Ctrl-C also leave)
"""

from sparkling.sparkling_ast import ASTNode, walk
from sparkling.sparkling_format import FORMATS, Formatter
from sparkling.sparkling_lexer import SparklingSyntaxError
from sparkling.sparkling_parser import Parser

HELP_TEXT = """\
Commands:
  :format NAME   switch output format ({formats})
  :help          show this help
  exit, quit     leave the REPL"""


def print_error(message: str) -> None:
    print(f"[error] >>> {message}")


def handle_command(src: str, state: dict[str, str]) -> bool:
    """Handles a `:`-prefixed REPL command. Returns False if `src` is not one."""
    if not src.startswith(":"):
        return False
    command, _, argument = src[1:].partition(" ")
    argument = argument.strip()
    if command == "help":
        print(HELP_TEXT.format(formats=", ".join(FORMATS)))
    elif command == "format":
        if argument not in FORMATS:
            print_error(f"unknown format {argument!r}; choose one of {', '.join(FORMATS)}")
        else:
            state["format"] = argument
            print(f"[mode] >>> Output format: {argument}")
    else:
        print_error(f"unknown command ':{command}'")
    return True


def read_entry() -> str | None:
    """
    Reads one entry, continuing while `{` and `}` are unbalanced.
    Returns None when the user asks to leave.
    """
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            break
    return "\n".join(src_lines).strip()


def summary(tree: ASTNode) -> str:
    """One-line size report printed after each tree in verbose mode."""
    statements = len(tree.children)
    nodes = sum(1 for _ in walk(tree))
    return f"[info] >>> {statements} statement(s), {nodes} node(s)"


def start_repl(fmt: str = "sexpr", verbose: bool = False) -> None:
    print(f"Sparkling REPL [format={fmt}]. Type 'exit' or 'quit' to leave.")
    state = {"format": fmt}
    parser = Parser()

    while True:
        try:
            src = read_entry()
            if src is None:
                print("Exiting Sparkling REPL.")
                return
            if not src:
                continue
            if handle_command(src, state):
                continue

            try:
                tree = parser.parse(src, strict=True)
            except SparklingSyntaxError as e:
                print_error(str(e))
                continue
            assert tree is not None
            print(Formatter(state["format"]).format(tree))
            if verbose:
                print(summary(tree))
            tree.release()

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Sparkling REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
