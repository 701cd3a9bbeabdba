"""Azure VM Diagnostics Extension configuration toolkit.

Builds and parses the public configuration document consumed by the
IaaS diagnostics agent, attaches it to VM roles as an extension
reference, and uploads supporting files to Blob and File storage.
"""

__version__ = "0.1.0"
