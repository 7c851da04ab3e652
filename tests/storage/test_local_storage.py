from billdesk.storage.local import LocalStorage


class TestLocalStorage:
    def test_save_creates_file(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        path = storage.save("bills/1/BILL202506150001.pdf", b"pdf-content")

        target = tmp_path / "bills" / "1" / "BILL202506150001.pdf"
        assert target.read_bytes() == b"pdf-content"
        assert path == str(target.resolve())

    def test_creates_base_dir(self, tmp_path):
        new_dir = tmp_path / "invoices"
        LocalStorage(str(new_dir))
        assert new_dir.exists()

    def test_get_returns_file_data(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.save("bills/1/a.pdf", b"hello-pdf")
        assert storage.get("bills/1/a.pdf") == b"hello-pdf"

    def test_get_url_returns_path(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert storage.get_url("bills/1/a.pdf") == str((tmp_path / "bills" / "1" / "a.pdf").resolve())
