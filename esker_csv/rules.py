"""
Fixed conversion rules.

Anything an operator may reasonably change lives in config.py; the literals
here are part of the downstream ESKER contract and stay constant.
"""

OUTPUT_NAME_TEMPLATE = "synthomer_{site}_ESKER_{out_date}.csv"
OUTPUT_ENCODING = "utf-8"
OUT_DATE_FORMAT = "%Y-%m-%d"

# Site probe reads the header plus up to two data rows.
DETECTION_HEAD_LINES = 3
DETECTION_TOKENS = 3

# charset-normalizer only looks at the head of the file.
ENCODING_SAMPLE_BYTES = 64 * 1024

TEMP_PREFIX = ".esker-"
TEMP_SUFFIX = ".tmp"
