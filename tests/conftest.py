import pytest

from xcor.correlate import correlate_traces


@pytest.fixture
def write_trace(tmp_path):
    """Write arrival times to a trace file, one per line, and return its path."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text(''.join(f"{line}\n" for line in lines), encoding='ascii')
        return str(path)
    return _write


@pytest.fixture
def sample_result():
    # Throughput series [1, 2, 1] and [1, 2, 0, 1]
    return correlate_traces([0, 100, 100, 250], [50, 150, 150, 300], 100)
