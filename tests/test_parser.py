from picture_scrape.core.scraping.parser import extract_image_candidates


def test_img_sources_are_resolved_and_filtered():
    html = """
    <img src="/a.jpg">
    <img src="//cdn.x.com/b.png">
    <img src="https://elsewhere.org/c.svg">
    <img src="/tracker.php">
    <img src="/d.webp">
    """
    assert extract_image_candidates(html, "x.com", "https") == [
        "https://x.com//a.jpg",
        "https://cdn.x.com/b.png",
        "https://elsewhere.org/c.svg",
    ]


def test_img_without_src_is_skipped():
    html = '<img alt="no source"><img src=""><img data-src="/lazy.png">'
    assert extract_image_candidates(html, "x.com", "https") == []


def test_duplicates_are_kept_for_the_dedupe_pass():
    html = '<img src="/a.jpg"><img src="/a.jpg">'
    assert extract_image_candidates(html, "x.com", "http") == [
        "http://x.com//a.jpg",
        "http://x.com//a.jpg",
    ]


def test_style_backgrounds_bypass_the_image_filter():
    html = """
    <table><tr>
      <td style="background-image:url(c.gif)">1</td>
      <td style="background:url(banner.txt)">2</td>
      <td style="color:red">3</td>
    </tr></table>
    """
    assert extract_image_candidates(html, "x.com", "https") == [
        "https://x.com/c.gif",
        "https://x.com/banner.txt",
    ]


def test_img_candidates_come_before_style_candidates():
    html = """
    <table><tr><td style="background:url(bg.png)"></td></tr></table>
    <img src="/a.jpg">
    """
    assert extract_image_candidates(html, "x.com", "https") == [
        "https://x.com//a.jpg",
        "https://x.com/bg.png",
    ]


def test_style_selector_is_configurable():
    html = '<div style="background:url(hero.jpg)"></div>'
    assert extract_image_candidates(html, "x.com", "https") == []
    assert extract_image_candidates(html, "x.com", "https", style_selector="[style]") == [
        "https://x.com/hero.jpg"
    ]


def test_malformed_markup_does_not_raise():
    html = "<img src='/a.png'<td style=><<>></img"
    assert isinstance(extract_image_candidates(html, "x.com", "https"), list)
