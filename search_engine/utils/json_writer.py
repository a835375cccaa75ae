"""
Pretty JSON output for the index, the word counts and search results.

Output is tab-indented with one value per line, and scores are written as
fixed-point numbers with eight decimals, which ``json.dump`` cannot do.
Callers pass already-sorted mappings.
"""

import json
import io
from pathlib import Path
from typing import Iterable, List, Mapping, TextIO, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from search_engine.index.inverted_index import QueryResult


def _key(key: str) -> str:
    return json.dumps(key, ensure_ascii=False) + ": "


def _indent(level: int) -> str:
    return "\t" * level


def as_array(elements: Iterable[int], writer: TextIO, level: int = 0) -> None:
    """
    Write a JSON array of integers.
    
    Args:
        elements: Integers to write
        writer: Destination stream
        level: Indentation level of the opening bracket
    """
    writer.write("[")
    first = True
    for element in elements:
        writer.write("\n" if first else ",\n")
        first = False
        writer.write(_indent(level + 1) + str(element))
    writer.write("\n" + _indent(level) + "]")


def as_object(elements: Mapping[str, int], writer: TextIO, level: int = 0) -> None:
    """
    Write a JSON object mapping strings to integers.
    
    Args:
        elements: Mapping to write
        writer: Destination stream
        level: Indentation level of the opening brace
    """
    writer.write("{")
    first = True
    for key, value in elements.items():
        writer.write("\n" if first else ",\n")
        first = False
        writer.write(_indent(level + 1) + _key(key) + str(value))
    writer.write("\n" + _indent(level) + "}")


def as_nested_array(elements: Mapping[str, Iterable[int]], writer: TextIO, level: int = 0) -> None:
    """Write a JSON object mapping strings to integer arrays."""
    writer.write("{")
    first = True
    for key, values in elements.items():
        writer.write("\n" if first else ",\n")
        first = False
        writer.write(_indent(level + 1) + _key(key))
        as_array(values, writer, level + 1)
    writer.write("\n" + _indent(level) + "}")


def as_nested_object(elements: Mapping[str, Mapping[str, Iterable[int]]], writer: TextIO, level: int = 0) -> None:
    """Write the term -> location -> positions structure of an index."""
    writer.write("{")
    first = True
    for key, nested in elements.items():
        writer.write("\n" if first else ",\n")
        first = False
        writer.write(_indent(level + 1) + _key(key))
        as_nested_array(nested, writer, level + 1)
    writer.write("\n" + _indent(level) + "}")


def as_result(result: "QueryResult", writer: TextIO, level: int = 0) -> None:
    """Write a single search result as a count/score/where object."""
    inner = _indent(level + 1)
    writer.write("{\n")
    writer.write(inner + _key("count") + str(result.match_count) + ",\n")
    writer.write(inner + _key("score") + f"{result.score:.8f}" + ",\n")
    writer.write(inner + _key("where") + json.dumps(result.location, ensure_ascii=False) + "\n")
    writer.write(_indent(level) + "}")


def as_results(elements: Mapping[str, List["QueryResult"]], writer: TextIO, level: int = 0) -> None:
    """Write a mapping from query strings to their ranked result lists."""
    writer.write("{")
    first = True
    for query, results in elements.items():
        writer.write("\n" if first else ",\n")
        first = False
        writer.write(_indent(level + 1) + _key(query) + "[")
        first_result = True
        for result in results:
            writer.write("\n" if first_result else ",\n")
            first_result = False
            writer.write(_indent(level + 2))
            as_result(result, writer, level + 2)
        writer.write("\n" + _indent(level + 1) + "]")
    writer.write("\n" + _indent(level) + "}")


def write_index(elements: Mapping[str, Mapping[str, Iterable[int]]], path: Union[str, Path]) -> None:
    """Write an index structure to a UTF-8 file."""
    with open(path, 'w', encoding='utf-8') as f:
        as_nested_object(elements, f)


def write_counts(elements: Mapping[str, int], path: Union[str, Path]) -> None:
    """Write word counts to a UTF-8 file."""
    with open(path, 'w', encoding='utf-8') as f:
        as_object(elements, f)


def write_results(elements: Mapping[str, List["QueryResult"]], path: Union[str, Path]) -> None:
    """Write search results to a UTF-8 file."""
    with open(path, 'w', encoding='utf-8') as f:
        as_results(elements, f)


def nested_object_to_string(elements: Mapping[str, Mapping[str, Iterable[int]]]) -> str:
    """Render an index structure as a string."""
    buffer = io.StringIO()
    as_nested_object(elements, buffer)
    return buffer.getvalue()


def results_to_string(elements: Mapping[str, List["QueryResult"]]) -> str:
    """Render search results as a string."""
    buffer = io.StringIO()
    as_results(elements, buffer)
    return buffer.getvalue()
