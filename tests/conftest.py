"""Shared pytest fixtures for the VM diagnostics test suite."""

from pathlib import Path

import pytest
from lxml import etree

from vm_diagnostics.builder import make_parser

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"

STORAGE_ACCOUNT_NAME = "testname"
STORAGE_ACCOUNT_KEY = "dGVzdGtleQ=="  # base64("testkey")

WAD_CFG_CONTENT = (
    '<DiagnosticMonitorConfiguration configurationChangePollInterval="PT10M" '
    'overallQuotaInMB="4096">'
    '<DiagnosticInfrastructureLogs scheduledTransferLogLevelFilter="Verbose" '
    'bufferQuotaInMB="100" scheduledTransferPeriod="PT1M"/>'
    '<Directories bufferQuotaInMB="1000" scheduledTransferPeriod="PT1M">'
    '<CrashDumps container="crashdumpdir" directoryQuotaInMB="500"/>'
    '<IISLogs container="iislogdir" directoryQuotaInMB="100"/>'
    "</Directories>"
    '<WindowsEventLog scheduledTransferLogLevelFilter="Verbose" bufferQuotaInMB="100">'
    '<DataSource name="Application!*"/>'
    '<DataSource name="System!*"/>'
    "</WindowsEventLog>"
    "</DiagnosticMonitorConfiguration>"
)


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def wad_cfg_file(data_dir: Path) -> Path:
    """Path to a full DiagnosticMonitorConfiguration file."""
    return data_dir / "diagnostics_monitor.xml"


# ---------------------------------------------------------------------------
# Fragment fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def wad_cfg() -> etree._Element:
    """A namespace-less WadCfg fragment with nested elements and attributes."""
    return etree.fromstring(WAD_CFG_CONTENT, parser=make_parser())


@pytest.fixture()
def account_name() -> str:
    return STORAGE_ACCOUNT_NAME


@pytest.fixture()
def account_key() -> str:
    return STORAGE_ACCOUNT_KEY
