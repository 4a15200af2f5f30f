"""
s3jail - jailed path resolution for SFTP sessions over object storage.
"""
__version__ = "0.1.0"
