# -*- coding: utf-8 -*-
import requests
import time
from tqdm import tqdm

import watchlist_files

# --- Configuration ---
# --------------------------------------------------------------------------
# Credentials file holding the MAL Client ID: {"MALClientId": "..."}
# Register MAL App: https://myanimelist.net/apiconfig
CREDENTIALS_PATH = "Credentials.json"

# Attempts per anime before the entry is given up on
MAL_MAX_ATTEMPTS = 3
# Delay between attempts (seconds) - None retries immediately
MAL_RETRY_DELAY = None
# --------------------------------------------------------------------------

# --- Constants ---
MAL_API_URL = "https://api.myanimelist.net/v2"
MAL_ANIME_FIELDS = "title,main_picture,alternative_titles"
# Seconds per MAL request
REQUEST_TIMEOUT = 100


class CredentialsError(Exception):
    """Raised when the MAL credentials file cannot be used."""


# --- Retry Helper ---

def retry_call(attempt, max_attempts, on_failure, delay=None):
    """
    Calls `attempt` until it returns a value other than None, at most
    `max_attempts` times. Exceptions raised by `attempt` count as a failed try.

    After the last failed try `on_failure` is called exactly once with the last
    exception (None if the last try just returned None).

    Returns (success, value).
    """
    tries = 0
    last_error = None
    while tries < max_attempts:
        tries += 1
        try:
            value = attempt()
            if value is not None:
                return True, value
            last_error = None
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            last_error = e

        if tries < max_attempts and delay:
            time.sleep(delay)

    on_failure(last_error)
    return False, None


# --- MAL Client ---

def entry_from_details(mal_id, details):
    """Maps a MAL anime details response to an output entry (link left empty)."""
    if not isinstance(details, dict):
        raise TypeError(f"MAL returned non-object JSON for id {mal_id}")

    # MAL's main title is the romanized original title, treated as the Japanese name
    title_main = details["title"]
    alt_titles = details.get("alternative_titles") or {}
    picture = details.get("main_picture") or {}

    return watchlist_files.new_output_entry(
        mal_id,
        name_en=alt_titles.get("en") or "",
        name_jp=title_main or "",
        image_url=picture.get("medium") or "",
    )


class MalClient:
    """Fetches anime details from the public MAL API (Client ID only, no OAuth)."""

    def __init__(self, credentials_path=CREDENTIALS_PATH, session=None,
                 max_attempts=MAL_MAX_ATTEMPTS, retry_delay=MAL_RETRY_DELAY):
        credentials = watchlist_files.load_credentials(credentials_path)
        if credentials is None:
            raise CredentialsError(f"Failed to read and parse MAL credentials from '{credentials_path}'.")

        self.client_id = credentials["MALClientId"]
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({"X-MAL-CLIENT-ID": self.client_id})

    def close(self):
        self.session.close()

    def _get_details(self, mal_id):
        url = f"{MAL_API_URL}/anime/{mal_id}?fields={MAL_ANIME_FIELDS}"
        response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status() # 404 for unknown ids, 429 when rate limited, 5xx
        return entry_from_details(mal_id, response.json())

    def create_entry(self, mal_id):
        """Requests details for one anime. Returns a filled output entry or None."""
        def report(error):
            tqdm.write(f"Error: Failed to create entry for id {mal_id}: {error or 'empty response'}")

        success, entry = retry_call(
            lambda: self._get_details(mal_id),
            self.max_attempts,
            report,
            delay=self.retry_delay,
        )
        return entry if success else None
