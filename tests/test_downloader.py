import hashlib
from pathlib import Path

import pytest
import requests

from picture_scrape.core.errors import DownloadError
from picture_scrape.core.scraping.downloader import Downloader, unique_filenames
from picture_scrape.core.scraping.fetcher import Fetcher

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 20000


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://x.com/img/cat.png", "cat.png"),
        ("https://x.com/a/b.png?x=1", "b.png"),
        ("https://x.com/", "unknown.jpg"),
        ("https://x.com", "unknown.jpg"),
    ],
)
def test_filename_from_url(url, expected):
    assert Downloader.filename_from_url(url) == expected


def test_download_streams_to_disk(fake_http, tmp_path):
    fake_http.add("https://cdn.y.com/img/cat.png", content=PNG_BYTES)

    info = Downloader().download("https://cdn.y.com/img/cat.png", str(tmp_path))

    out = Path(info["path"])
    assert out == tmp_path / "cat.png"
    assert out.read_bytes() == PNG_BYTES
    assert info["sha256"] == hashlib.sha256(PNG_BYTES).hexdigest()
    assert info["size"] == str(len(PNG_BYTES))
    assert info["status_code"] == "200"
    assert fake_http.calls[0][1]["stream"] is True


def test_download_creates_destination(fake_http, tmp_path):
    fake_http.add("https://x.com/a.gif", content=b"GIF89a")
    dest = tmp_path / "nested" / "dir"

    info = Downloader().download("https://x.com/a.gif", str(dest))

    assert Path(info["path"]).parent == dest


def test_download_http_error(fake_http, tmp_path):
    fake_http.add("https://x.com/gone.png", status_code=404)

    with pytest.raises(DownloadError):
        Downloader().download("https://x.com/gone.png", str(tmp_path))
    assert not (tmp_path / "gone.png").exists()


def test_download_network_error(fake_http, tmp_path):
    with pytest.raises(DownloadError):
        Downloader().download("https://nowhere.invalid/a.png", str(tmp_path))


def test_download_all_skips_failures_and_keeps_order(fake_http, tmp_path):
    urls = [f"https://x.com/{i}.png" for i in range(6)]
    for i, u in enumerate(urls):
        if i != 3:
            fake_http.add(u, content=bytes([i]) * 10)

    infos = Downloader().download_all(urls, str(tmp_path), max_workers=2)

    assert [i["url"] for i in infos] == [u for n, u in enumerate(urls) if n != 3]
    assert (tmp_path / "5.png").read_bytes() == bytes([5]) * 10


def test_fetch_gif(fake_http):
    fake_http.add(
        "https://x.com/a.gif", content=b"GIF89a...", headers={"Content-Type": "image/gif"}
    )

    assert Downloader().fetch_gif("https://x.com/a.gif") == b"GIF89a..."


def test_fetch_gif_rejects_other_content_types(fake_http):
    fake_http.add(
        "https://x.com/a.gif", content=b"<html>", headers={"Content-Type": "text/html"}
    )

    with pytest.raises(DownloadError):
        Downloader().fetch_gif("https://x.com/a.gif")


def test_fetch_gif_rejects_bad_status(fake_http):
    fake_http.add(
        "https://x.com/a.gif", status_code=500, headers={"Content-Type": "image/gif"}
    )

    with pytest.raises(DownloadError):
        Downloader().fetch_gif("https://x.com/a.gif")


def _cut_after_ten_bytes(chunk_size=1):
    yield b"x" * 10
    raise requests.ConnectionError("connection reset")


def test_http_error_closes_the_response(fake_http, tmp_path):
    resp = fake_http.add("https://x.com/gone.png", status_code=404)

    with pytest.raises(DownloadError):
        Downloader().download("https://x.com/gone.png", str(tmp_path))
    assert resp.closed


def test_interrupted_download_leaves_no_file(fake_http, tmp_path):
    resp = fake_http.add("https://x.com/cut.png", content=b"x" * 100)
    resp.iter_content = _cut_after_ten_bytes

    with pytest.raises(DownloadError):
        Downloader().download("https://x.com/cut.png", str(tmp_path))
    assert resp.closed
    assert list(tmp_path.iterdir()) == []


def test_failed_download_keeps_previous_file(fake_http, tmp_path):
    (tmp_path / "cut.png").write_bytes(b"old")
    resp = fake_http.add("https://x.com/cut.png", content=b"x" * 100)
    resp.iter_content = _cut_after_ten_bytes

    with pytest.raises(DownloadError):
        Downloader().download("https://x.com/cut.png", str(tmp_path))
    assert (tmp_path / "cut.png").read_bytes() == b"old"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cut.png"]


def test_unique_filenames():
    urls = [
        "https://x.com/a/logo.png",
        "https://x.com/b/logo.png",
        "https://cdn.x.com/logo.png",
        "https://x.com/",
        "https://y.com/",
        "https://x.com/other.gif",
    ]
    assert unique_filenames(urls) == [
        "logo.png",
        "logo-1.png",
        "logo-2.png",
        "unknown.jpg",
        "unknown-1.jpg",
        "other.gif",
    ]


def test_download_all_keeps_same_named_images_apart(fake_http, tmp_path):
    fake_http.add("https://x.com/a/logo.png", content=b"a" * 2000)
    fake_http.add("https://x.com/b/logo.png", content=b"b" * 4000)

    infos = Downloader().download_all(
        ["https://x.com/a/logo.png", "https://x.com/b/logo.png"],
        str(tmp_path),
        max_workers=2,
    )

    assert [Path(i["path"]).name for i in infos] == ["logo.png", "logo-1.png"]
    assert (tmp_path / "logo.png").read_bytes() == b"a" * 2000
    assert (tmp_path / "logo-1.png").read_bytes() == b"b" * 4000
    assert infos[1]["sha256"] == hashlib.sha256(b"b" * 4000).hexdigest()


def test_image_downloads_retry_but_page_fetches_do_not():
    downloader = Downloader()
    page_fetcher = Fetcher(allowed_domain="x.com")

    retry = downloader.fetcher.session.get_adapter("https://x.com/").max_retries
    assert retry.total == 2
    assert 503 in retry.status_forcelist
    assert page_fetcher.session.get_adapter("https://x.com/").max_retries.total == 0


def test_close_only_closes_owned_fetcher(monkeypatch):
    closed = []
    monkeypatch.setattr(Fetcher, "close", lambda self: closed.append(self))
    injected = Fetcher()

    with Downloader(fetcher=injected):
        pass
    assert closed == []

    with Downloader() as d:
        pass
    assert closed == [d.fetcher]
