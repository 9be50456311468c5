# -*- coding: utf-8 -*-
import datetime
import json
import math
import os

# --- Constants ---
# Sections of the raw watchlist (input) and of the processed watchlist (output)
INPUT_SECTIONS = ["Watching", "Completed", "Plan to Watch", "Dropped"]
OUTPUT_SECTIONS = ["ToWatch", "Completed", "Dropped"]

# --- Generic JSON Helpers ---

def load_json_generic(path):
    """Loads JSON from a file. Returns None if the file is missing or unreadable."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, IOError) as e:
        print(f"Warning: Could not load {path}: {e}")
        return None

def save_json_generic(data, path, pretty=False):
    """Saves data as JSON to a file. Returns True on success."""
    try:
        # Serialize fully before opening, a failed dump must not truncate the old file
        if pretty:
            content = json.dumps(data, ensure_ascii=False, indent=2)
        else:
            content = json.dumps(data, ensure_ascii=False, separators=(',', ':'))
        content = content.encode('utf-8')
        with open(path, 'wb') as f:
            f.write(content)
        return True
    except (IOError, TypeError, ValueError) as e:
        print(f"Error: Could not save {path}: {e}")
        return False

# --- Entries ---

def new_output_entry(mal_id, name_en="", name_jp="", link="", image_url=""):
    return {
        "name_en": name_en,
        "name_jp": name_jp,
        "mal_id": mal_id,
        "link": link,
        "image_url": image_url,
    }

def _read_section(data, section, fields):
    """Normalizes one list section. Raises ValueError/TypeError on a malformed section."""
    entries = data.get(section)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise TypeError(f"section '{section}' is not a list")

    normalized = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise TypeError(f"entry in section '{section}' is not an object")
        item = {}
        for key, default in fields.items():
            value = entry.get(key)
            item[key] = default if value is None else value
        item["mal_id"] = parse_mal_id(item["mal_id"], section)
        normalized.append(item)
    return normalized

def parse_mal_id(value, section):
    """MAL IDs are unsigned integers; digit strings and whole floats are accepted too."""
    if isinstance(value, bool):
        raise TypeError(f"boolean mal_id in section '{section}'")
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and value >= 0:
        return int(value)
    if isinstance(value, int) and value >= 0:
        return value
    raise ValueError(f"invalid mal_id {value!r} in section '{section}'")

# --- Watchlist Files ---

def load_input(path):
    """
    Loads the raw watchlist:
    {"Watching": [...], "Completed": [...], "Plan to Watch": [...], "Dropped": [...]}
    with entries {link, name, mal_id, watchListType}. Missing sections are empty.

    Returns None if the file is missing or cannot be parsed.
    """
    data = load_json_generic(path)
    if not isinstance(data, dict):
        return None

    fields = {"link": "", "name": "", "mal_id": 0, "watchListType": 0}
    try:
        return {section: _read_section(data, section, fields) for section in INPUT_SECTIONS}
    except (ValueError, TypeError) as e:
        print(f"Warning: Malformed watchlist in {path}: {e}")
        return None

def load_output(path):
    """Loads a previously processed watchlist. Returns None if missing or unparsable."""
    data = load_json_generic(path)
    if not isinstance(data, dict):
        return None

    fields = {"name_en": "", "name_jp": "", "mal_id": 0, "link": "", "image_url": ""}
    try:
        output = {section: _read_section(data, section, fields) for section in OUTPUT_SECTIONS}
    except (ValueError, TypeError) as e:
        print(f"Warning: Malformed processed watchlist in {path}: {e}")
        return None
    output["LastUpdated"] = data.get("LastUpdated")
    return output

def save_output(output, path, pretty=False):
    """Stamps LastUpdated and writes the processed watchlist. Returns True on success."""
    document = {
        "LastUpdated": now_timestamp(),
        "ToWatch": output.get("ToWatch", []),
        "Completed": output.get("Completed", []),
        "Dropped": output.get("Dropped", []),
    }
    output["LastUpdated"] = document["LastUpdated"]
    return save_json_generic(document, path, pretty=pretty)

def load_credentials(path):
    """Loads {"MALClientId": "..."}. Returns None if missing, unparsable or empty."""
    data = load_json_generic(path)
    if not isinstance(data, dict):
        return None
    client_id = data.get("MALClientId")
    if not isinstance(client_id, str) or not client_id.strip():
        return None
    return {"MALClientId": client_id.strip()}

def now_timestamp():
    # Local time with UTC offset, e.g. 2024-05-01T18:30:00.123456+02:00
    return datetime.datetime.now().astimezone().isoformat()
