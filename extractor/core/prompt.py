NO_TABLE_MARKER = "ERROR"

EXTRACTION_PROMPT = f"""
Task: Extract data from this image into clean CSV format.
Rules:
1. Output ONLY the CSV data. No markdown, no explanations.
2. Use comma (,) delimiter.
3. Handle merged cells by duplicating values.
4. If no table found, return "{NO_TABLE_MARKER}".
""".strip()
