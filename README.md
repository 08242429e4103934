# pura

Scrape, download and emulate podcast feeds.

`pura` works in three steps:

1. **scrape** a podcast from an RSS feed, or from a web page that embeds a
   Simplecast player, and store its metadata locally as YAML;
2. **download** the episodes' audio, then tag each file with a fresh ID3v2.4
   tag and a cover image resized to 720 × 720 pixels;
3. **emulate** RSS feeds whose enclosures point at the downloaded files: one
   for the whole podcast, one per season and one per season and year.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Every command takes a podcast ID, which names the podcast on disk. It may
contain only lowercase letters, digits and hyphens.

```
pura scrape my-show https://feeds.example.com/my-show
pura download my-show
pura download my-show 2019
pura emulate my-show
```

- `scrape ID URL`: a HEAD request is made to the URL. If it answers with the
  content type `application/xml` the body is read as an RSS feed with iTunes
  extensions. Otherwise the page is searched for an `iframe` whose `src` or
  `data-src` points at `player.simplecast.com` or `embed.simplecast.com`, and
  the podcast, its paginated playlist and every episode are fetched from the
  Simplecast API (up to 8 episodes at a time; episodes that fail are logged
  and skipped). The result is saved as `CACHE_DIR/podcasts/ID.yml`.
- `download ID [YEAR]`: for every stored episode not yet present in the
  output directory (and, with `YEAR`, published in that year), downloads the
  audio, copies it to
  `OUTPUT_DIR/ID/Sxx/YYYY/<date> <number> <title>.<ext>`, removes any APE,
  ID3v1 and ID3v2 tags and writes a new ID3v2.4 tag with title, artist,
  album (`Season N`), disc, year, track, comment and front cover. Up to 8
  episodes are processed at a time; failures are logged and skipped.
- `emulate ID`: writes `OUTPUT_DIR/ID/feed.xml`, then
  `OUTPUT_DIR/ID/Sxx/feed.xml` for each season and
  `OUTPUT_DIR/ID/Sxx/YYYY/feed.xml` for each season and year.

Logging goes to standard error at debug level. A command that fails logs the
reason and exits with status 1.

## Configuration

Settings are read from the environment; empty values count as unset:

| Variable         | Meaning                                            | Default  |
|------------------|----------------------------------------------------|----------|
| `CACHE_DIR`      | Cache for HTTP responses and podcast metadata      | `cache`  |
| `OUTPUT_DIR`     | Where audio files and feeds are written            | `output` |
| `SERVER_BASE`    | Base URL for enclosure links in emulated feeds     | none     |
| `EXPECT_IP`      | Stop unless the external IP address matches        | none     |
| `EXPECT_COUNTRY` | Stop unless the geolocated country matches         | none     |

Before any command runs, these directories must already exist:
`CACHE_DIR`, `CACHE_DIR/http`, `CACHE_DIR/podcasts` and `OUTPUT_DIR`.

When `EXPECT_IP` or `EXPECT_COUNTRY` is set, `https://ipinfo.io` is queried
and the command stops if either value differs.

Without `SERVER_BASE`, emulated feeds link to the audio files with `file://`
URLs; with it, links are the audio path joined to that base.

HTTP responses are cached under `CACHE_DIR/http/<domain>/<path>`, so running a
command again reuses what was already fetched. A cached JSON body that cannot
be decoded is removed.

## Use as a library

`pura.provider.ServiceProvider.create()` reads the configuration, validates
it and returns the shared services (`options`, `paths`, `http`, `podcasts`).
The commands can then be used directly:

```python
from pura.provider import ServiceProvider
from pura.scrape import ScrapeCommand
from pura.download import DownloadCommand
from pura.emulate import EmulateCommand

services = ServiceProvider.create()
podcast = ScrapeCommand(services.http, services.podcasts).execute(
    "my-show", "https://feeds.example.com/my-show"
)
DownloadCommand(services.paths, services.http, services.podcasts).execute("my-show", 2019)
feeds = EmulateCommand(services.podcasts, services.paths).execute("my-show")
```

Each command raises its own exception (`ScrapeError`, `DownloadError`,
`EmulateError`) when it cannot complete; `ServiceProvider.create` raises
`ServiceError`.

## What it does not do

- It does not serve the emulated feeds or audio files over HTTP;
  `SERVER_BASE` only sets the URLs written into the feeds.
- It does not create the cache and output directories; they must exist.
- Only RSS feeds and pages embedding a Simplecast player can be scraped.