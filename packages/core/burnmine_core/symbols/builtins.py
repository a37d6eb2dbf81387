"""The builtin namespace: predeclared functions and types visible from every file."""

from __future__ import annotations

from burnmine_core.symbols.models import (
    FunctionSignature,
    Parameter,
    SymbolTable,
    TypeDefinition,
)

BUILTIN_URI = "__builtin__"

PRIMITIVE_TYPES: tuple[str, ...] = ("int", "float", "string", "bool")

# name -> (parameters, return type, documentation)
_BUILTIN_FUNCTIONS: dict[str, tuple[list[tuple[str, str]], str, str]] = {
    "print": ([("value", "any")], "", "Prints a value to the console."),
    "toString": ([("value", "any")], "string", "Converts a value to a string representation."),
    "input": (
        [("prompt", "string")],
        "string",
        "Reads a line of input from the user with the given prompt.",
    ),
    "now": ([], "Date", "Returns the current date as a Date object."),
    "formatDate": ([("date", "Date")], "string", "Formats a Date object as a string."),
    "createDate": (
        [("year", "int"), ("month", "int"), ("day", "int")],
        "Date",
        "Creates a new Date object with the specified year, month, and day.",
    ),
    "power": (
        [("base", "int"), ("exp", "int")],
        "int",
        "Calculates the power of a number (base^exp).",
    ),
    "isEven": ([("num", "int")], "bool", "Checks if a number is even."),
    "join": (
        [("str1", "string"), ("str2", "string"), ("separator", "string")],
        "string",
        "Joins two strings with a separator.",
    ),
    "currentYear": ([], "int", "Returns the current year."),
    "currentMonth": ([], "int", "Returns the current month (1-12)."),
    "currentDay": ([], "int", "Returns the current day of the month."),
    "addDays": (
        [("date", "Date"), ("days", "int")],
        "Date",
        "Adds the specified number of days to a date.",
    ),
    "subtractDays": (
        [("date", "Date"), ("days", "int")],
        "Date",
        "Subtracts the specified number of days from a date.",
    ),
    "isLeapYear": ([("year", "int")], "bool", "Checks if a year is a leap year."),
    "daysInMonth": (
        [("year", "int"), ("month", "int")],
        "int",
        "Returns the number of days in the specified month.",
    ),
    "dayOfWeek": (
        [("date", "Date")],
        "int",
        "Returns the day of the week (0 = Sunday, 6 = Saturday).",
    ),
    "createTime": (
        [("hours", "int"), ("minutes", "int"), ("seconds", "int"), ("milliseconds", "int")],
        "Time",
        "Creates a new Time object with the specified hours, minutes, seconds, and milliseconds.",
    ),
    "currentTime": ([], "Time", "Returns the current time as a Time object."),
    "formatTime": (
        [("time", "Time"), ("includeMilliseconds", "bool")],
        "string",
        "Formats a Time object as HH:MM:SS, or HH:MM:SS.mmm with milliseconds.",
    ),
    "split": (
        [("text", "string"), ("delimiter", "string")],
        "array",
        "Splits a string by the given delimiter and returns an array of substrings.",
    ),
    "charAt": (
        [("text", "string"), ("index", "int")],
        "string",
        "Returns the character at the specified index in a string.",
    ),
    "parseInt": ([("text", "string")], "int", "Parses a string into an integer."),
    "size": ([("text", "string")], "int", "Returns the length of a string."),
    "substring": (
        [("text", "string"), ("start", "int"), ("end", "int")],
        "string",
        "Returns the substring from start (inclusive) to end (exclusive).",
    ),
    "append": (
        [("items", "array"), ("item", "any")],
        "array",
        "Appends an item to an array and returns the new array.",
    ),
}

_BUILTIN_TYPES: dict[str, dict[str, str]] = {
    "Date": {"year": "int", "month": "int", "day": "int"},
    "Time": {"hours": "int", "minutes": "int", "seconds": "int", "milliseconds": "int"},
}


def build_builtin_table() -> SymbolTable:
    """Build the builtin namespace table.

    Primitive types come first so that type listings start with them.
    """
    table = SymbolTable(uri=BUILTIN_URI)

    for primitive in PRIMITIVE_TYPES:
        table.types[primitive] = TypeDefinition(name=primitive)
    for type_name, fields in _BUILTIN_TYPES.items():
        table.types[type_name] = TypeDefinition(name=type_name, fields=dict(fields))

    for name, (params, return_type, doc) in _BUILTIN_FUNCTIONS.items():
        table.functions[name] = FunctionSignature(
            name=name,
            parameters=[Parameter(p_name, p_type) for p_name, p_type in params],
            return_type=return_type,
            documentation=doc,
        )

    return table
