"""
Database backup app.

This app produces point-in-time dumps of a configured Django database connection and:
- Optionally compresses (gzip) and encrypts (Fernet) the dump in place
- Records dump metadata in the database
- Fans the finished dump out to Amazon S3 and Dropbox
- Optionally removes the local copy once it is safely stored on S3
"""
