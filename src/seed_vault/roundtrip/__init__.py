"""
Seed round trip: generate, encrypt, decrypt-verify, upload, download-verify.

Entry points:
- cli: `seed-vault <key_name> <bucket_name>`
- handler.lambda_handler: same run driven by an event payload
"""
