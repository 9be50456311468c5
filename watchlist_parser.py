# -*- coding: utf-8 -*-
import sys
from tqdm import tqdm

import mal_api
import watchlist_files

# --- Configuration ---
# --------------------------------------------------------------------------
# Paths used when not given on the command line:
#   python watchlist_parser.py [WatchlistRaw.json] [WatchlistProcessed.json]
DEFAULT_INPUT_PATH = "WatchlistRaw.json"
DEFAULT_OUTPUT_PATH = "WatchlistProcessed.json"
# Indent the processed watchlist (larger file, but human readable)
PRETTY_OUTPUT = False
# --------------------------------------------------------------------------

# --- Exit Codes ---
EXIT_OK = 0
EXIT_BAD_CREDENTIALS = 1
EXIT_BAD_INPUT = -1
EXIT_WRITE_FAILED = -2

# --- Cache Lookup ---

def build_cache_pool(previous_output):
    """Indexes every entry of a previous run by MAL ID. First occurrence wins."""
    pool = {}
    if not previous_output:
        return pool
    for section in ("Completed", "Dropped", "ToWatch"):
        for entry in previous_output.get(section, []):
            pool.setdefault(entry["mal_id"], entry)
    return pool

def lookup_cached_entry(pool, mal_id):
    return pool.get(mal_id)

# --- Section Processing ---

def new_stats():
    return {"cached": 0, "fetched": 0, "skipped": 0}

def process_section(mal, pool, entries, section_name, stats=None):
    """
    Resolves the entries of one watchlist section, keeping their order.
    Known anime are copied from the previous run, new ones are requested from MAL.
    Entries MAL fails on are logged and left out.
    """
    if stats is None:
        stats = new_stats()
    output = []

    for entry in tqdm(entries, desc=f"Processing {section_name}"):
        mal_id = entry["mal_id"]
        cached = lookup_cached_entry(pool, mal_id)

        if cached is not None:
            output_entry = dict(cached)
            stats["cached"] += 1
        else: # only request data from MAL if the anime is new on the watchlist
            output_entry = mal.create_entry(mal_id)
            if output_entry is None:
                tqdm.write(f"Skipping entry {mal_id} \"{entry['name']}\": Failed to process entry!")
                stats["skipped"] += 1
                continue
            stats["fetched"] += 1

        # Link always comes from the current watchlist, MAL's API doesn't return it
        output_entry["link"] = entry["link"]
        output.append(output_entry)

    return output

# --- Main Execution ---

def run(input_path=DEFAULT_INPUT_PATH, output_path=DEFAULT_OUTPUT_PATH,
        credentials_path=mal_api.CREDENTIALS_PATH, session=None, pretty=PRETTY_OUTPUT):
    """Processes the raw watchlist into the output file. Returns the exit code."""
    # 1. Raw watchlist
    watchlist = watchlist_files.load_input(input_path)
    if watchlist is None:
        print(f"Error: Failed to parse input list! (File: {input_path})")
        return EXIT_BAD_INPUT

    # 2. Previous output, used to skip anime that were already processed
    previous_output = watchlist_files.load_output(output_path)
    if previous_output is None:
        print(f"No previous output found at {output_path}, every entry will be requested from MAL.")
    pool = build_cache_pool(previous_output)

    # 3. MAL client
    try:
        mal = mal_api.MalClient(credentials_path, session=session)
    except mal_api.CredentialsError as e:
        print(f"Error: {e}")
        return EXIT_BAD_CREDENTIALS

    # 4. Process every section
    stats = new_stats()
    try:
        output = {
            "Completed": process_section(mal, pool, watchlist["Completed"], "Completed", stats),
            "Dropped": process_section(mal, pool, watchlist["Dropped"], "Dropped", stats),
            "ToWatch": process_section(mal, pool, watchlist["Watching"], "Watching", stats),
        }
        output["ToWatch"].extend(process_section(mal, pool, watchlist["Plan to Watch"], "Plan to Watch", stats))
    finally:
        mal.close()

    # 5. Write processed watchlist
    if not watchlist_files.save_output(output, output_path, pretty=pretty):
        print(f"Error: Failed to write processed watchlist! (File: {output_path})")
        return EXIT_WRITE_FAILED

    print("\n--- Watchlist Summary ---")
    print(f"Reused {stats['cached']} entries from the previous run.")
    print(f"Fetched {stats['fetched']} new entries from MAL.")
    print(f"Skipped {stats['skipped']} entries (MAL request failed, see log above).")
    print(f"To Watch: {len(output['ToWatch'])}, Completed: {len(output['Completed'])}, Dropped: {len(output['Dropped'])}")
    print(f"Wrote {output_path}")
    return EXIT_OK

def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    input_path = args[0] if len(args) >= 1 else DEFAULT_INPUT_PATH
    output_path = args[1] if len(args) >= 2 else DEFAULT_OUTPUT_PATH
    return run(input_path, output_path)


if __name__ == "__main__":
    sys.exit(main())
