"""Operations built on the configuration builder.

Each module implements a single operation:
- load_configuration: Read a WadCfg fragment from a file or string
- set_diagnostics_extension: Attach the diagnostics agent to a VM role
- get_diagnostics_extension: Read diagnostics settings from a VM role
- upload_blob: Upload a local file to Blob Storage
- upload_file_share: Upload a local file to an Azure file share
"""
