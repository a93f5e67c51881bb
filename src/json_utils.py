"""JSON helpers backed by orjson."""

import orjson


def json_loads(b):
    return orjson.loads(b)


def json_dumps(obj, pretty: bool = False) -> str:
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(obj, option=option).decode("utf-8")


def json_load_file(path: str):
    with open(path, "rb") as f:
        return json_loads(f.read())


def json_dump_file(path: str, obj, pretty: bool = False) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(json_dumps(obj, pretty))
