"""
hopen CLI package.

- _args: argument registration
- _dispatcher: entry point and exit codes
- _menu: numbered menus and yes/no prompts
- _output: status lines and the console UI
"""
from ._output import ConsoleUI, print_error, print_success, print_warning

__all__ = [
    "ConsoleUI",
    "print_error",
    "print_success",
    "print_warning",
]
