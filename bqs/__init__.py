"""bqs - cached BigQuery metadata browser built on the bq command line tool."""
