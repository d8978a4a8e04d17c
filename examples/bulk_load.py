"""Bulk load example with a progress bar.

This example loads the whole collection in concurrent batches. The
first run downloads every record and stores a snapshot; every later run
returns the snapshot without touching the network.
"""

from dexcache import Dex, RichProgressReporter, load_config


# Smaller batches with a longer pause are gentler on the public API
config = load_config(batch_size=5, batch_delay=0.2)

with Dex.from_config(config) as dex:
    with RichProgressReporter() as progress:
        records = dex.get_all_records(max_count=151, progress=progress)

    print(f"Loaded {len(records)} records")

    # Items that failed are kept in memory and can be retried
    if dex.failures:
        for failure in dex.failures:
            print(f"  {failure.item_id}: {failure.error}")
        recovered = dex.retry_failed()
        print(f"Recovered {len(recovered)} on retry")

    stats = dex.get_stats()
    print(f"Cache holds {stats.data.files} data files ({stats.data.size} bytes)")
