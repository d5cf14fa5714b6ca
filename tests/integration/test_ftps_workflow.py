"""Integration tests for FTPS workflows.

Runs FTPSClient against a pyftpdlib TLS server on localhost. The server
certificate is self-signed, so most tests use TRUST_ALL.
"""

import io

import pytest

from ftps_client.ftps.client import FTPSClient
from ftps_client.ftps.connection import ConnectionState, FTPSConnectionConfig
from ftps_client.ftps.exceptions import CertificateError, UnexpectedStatusError
from ftps_client.ftps.listing import EntryKind
from ftps_client.ftps.tls import TrustMode

from .mock_ftps_server import MockFTPSServer


@pytest.fixture
def ftps_server():
    """Provide a running mock FTPS server."""
    server = MockFTPSServer()
    server.start()
    yield server
    server.stop()


def make_config(server: MockFTPSServer, **overrides) -> FTPSConnectionConfig:
    """TRUST_ALL config for the mock server."""
    options = dict(
        host=server.host,
        port=server.port,
        username=server.username,
        password=server.password,
        trust_mode=TrustMode.TRUST_ALL,
        timeout=10,
    )
    options.update(overrides)
    return FTPSConnectionConfig(**options)


@pytest.fixture
def client(ftps_server):
    """Client connected lazily to the mock server."""
    ftps = FTPSClient(make_config(ftps_server))
    yield ftps
    ftps.close()


class TestLogin:
    """Control channel negotiation against a real TLS server."""

    def test_first_command_logs_in(self, client):
        """The first operation performs AUTH TLS and login."""
        assert client.state == ConnectionState.DISCONNECTED

        assert client.pwd() == "/"

        assert client.state == ConnectionState.TLS_AUTHENTICATED

    def test_close_disconnects(self, client):
        """close() sends QUIT and resets the state."""
        client.noop()
        client.close()
        assert client.state == ConnectionState.DISCONNECTED

    def test_wrong_password(self, ftps_server):
        """A rejected PASS surfaces as a 530 status error."""
        with FTPSClient(make_config(ftps_server, password="wrong")) as ftps:
            with pytest.raises(UnexpectedStatusError) as exc_info:
                ftps.pwd()
        assert exc_info.value.code == "530"

    def test_self_signed_certificate_rejected(self, ftps_server):
        """VERIFY without a trusted CA refuses the server certificate."""
        config = make_config(ftps_server, trust_mode=TrustMode.VERIFY)
        with FTPSClient(config) as ftps:
            with pytest.raises(CertificateError):
                ftps.pwd()
            assert ftps.state == ConnectionState.DISCONNECTED


class TestFileOperations:
    """Transfers and namespace operations."""

    def test_upload_list_download(self, client, ftps_server):
        """A stored file is listed and reads back identically."""
        payload = bytes(range(256)) * 64
        client.mkdir("/incoming")

        sent = client.store("/incoming/blob.bin", io.BytesIO(payload))

        assert sent == len(payload)
        assert ftps_server.local_path("/incoming/blob.bin").read_bytes() == payload

        entries = client.ls("/incoming")
        assert [(e.kind, e.name) for e in entries] == [(EntryKind.FILE, "blob.bin")]

        sink = io.BytesIO()
        assert client.retrieve("/incoming/blob.bin", sink) == len(payload)
        assert sink.getvalue() == payload

    def test_several_transfers_on_one_connection(self, client):
        """Each transfer gets its own data channel."""
        for index in range(3):
            client.store(f"/f{index}.txt", io.BytesIO(b"x" * index))

        names = sorted(entry.name for entry in client.ls("/"))
        assert names == ["f0.txt", "f1.txt", "f2.txt"]

    def test_names_with_spaces(self, client, ftps_server):
        """Names containing runs of spaces survive listing."""
        client.mkdir("/My  Music")
        client.store("/My  Music/01 intro  track.wav", io.BytesIO(b"RIFF"))

        entries = client.ls("/My  Music")

        assert entries[0].name == "01 intro  track.wav"
        assert ftps_server.local_path("/My  Music/01 intro  track.wav").exists()

    def test_local_file_round_trip(self, client, tmp_path):
        """store_file and retrieve_file work with paths on disk."""
        source = tmp_path / "report.csv"
        source.write_text("a,b\n1,2\n")
        target = tmp_path / "copy.csv"

        client.store_file("/report.csv", source)
        client.retrieve_file("/report.csv", target)

        assert target.read_text() == "a,b\n1,2\n"

    def test_read_first_line(self, client, ftps_server):
        """Only the first line is returned."""
        ftps_server.local_path("/VERSION").write_bytes(b"1.4.2\r\nbuild 99\r\n")
        assert client.read_first_line("/VERSION") == "1.4.2"

    def test_rename_and_file_exists(self, client, ftps_server):
        """rename moves the file; file_exists sees the change."""
        ftps_server.local_path("/old.txt").write_text("data")

        client.rename("/old.txt", "/new.txt")

        assert client.file_exists("/", "new.txt") is True
        assert client.file_exists("/", "old.txt") is False
        assert client.file_exists("/no-such-dir", "new.txt") is False

    def test_cd_and_relative_delete(self, client, ftps_server):
        """Relative names resolve against the working directory."""
        ftps_server.local_path("/docs").mkdir()
        ftps_server.local_path("/docs/readme.txt").write_text("hi")

        client.cd("/docs")
        assert client.pwd() == "/docs"
        client.rm_file("readme.txt")
        client.cd("/")
        client.rmdir("docs")

        assert not ftps_server.local_path("/docs").exists()

    def test_missing_file(self, client):
        """Server refusals keep the session usable."""
        with pytest.raises(UnexpectedStatusError) as exc_info:
            client.retrieve("/missing.bin", io.BytesIO())
        assert exc_info.value.code == "550"

        assert client.pwd() == "/"


class TestRecursiveDelete:
    """recursive_delete against a real directory tree."""

    def build_tree(self, server: MockFTPSServer) -> None:
        root = server.local_path("/top")
        (root / "sub" / "deeper").mkdir(parents=True)
        (root / "empty").mkdir()
        (root / "a.txt").write_text("a")
        (root / "sub" / "b.txt").write_text("b")
        (root / "sub" / "deeper" / "c d.txt").write_text("c")

    def test_tree_removed(self, client, ftps_server):
        """Every file and directory below and including the path is gone."""
        self.build_tree(ftps_server)
        ftps_server.local_path("/keep.txt").write_text("keep")

        client.recursive_delete("/top")

        assert not ftps_server.local_path("/top").exists()
        assert ftps_server.local_path("/keep.txt").exists()

    def test_root_contents_removed(self, client, ftps_server):
        """Deleting / empties it but leaves the root in place."""
        self.build_tree(ftps_server)
        ftps_server.local_path("/z.txt").write_text("z")

        client.recursive_delete("/")

        assert list(ftps_server.root_dir.iterdir()) == []
        assert client.ls("/") == []
