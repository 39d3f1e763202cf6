"""Tests for server-side landing page rendering."""

from homeleads.models.blocks import HeroElementsByColumn, SectionConfig
from homeleads.models.form import FormSchema
from homeleads.models.page import DomainBranding, LandingPageContent, SeoSettings
from homeleads.services.block_serialization import with_hero_elements
from homeleads.services.grid_layout import grid_placement, merge_layout
from homeleads.services.page_renderer import (
    render_form_html,
    render_hero_section,
    render_landing_page,
    render_not_found_page,
)
from homeleads.utils.html_sanitizer import sanitize_color, sanitize_rich_text, sanitize_url

FORM = {"fields": [
    {"id": "name", "type": "text", "label": "Name", "required": True},
    {"id": "email", "type": "email", "label": "Email", "required": True},
    {"id": "timeline", "type": "select", "label": "Timeline", "optionalSection": True,
     "options": [{"value": "now", "label": "Right away"}]},
]}


def make_content(**overrides) -> LandingPageContent:
    data = {
        "id": "page-1",
        "slug": "tetherow-home",
        "type": "buyer",
        "headline": "Find your Tetherow home",
        "subheadline": "Golf course living in Bend",
        "cta_text": "Get Access",
        "success_message": "<p>Thanks!</p>",
        "form_schema": FORM,
        "domain": DomainBranding(
            hostname="tetherowhomes.com",
            display_name="Tetherow Homes",
            primary_color="#0f766e",
            accent_color="#f59e0b",
        ),
    }
    data.update(overrides)
    return LandingPageContent(**data)


class TestRenderForm:
    """Tests for render_form_html."""

    def test_empty_schema_renders_nothing(self):
        content = make_content()
        assert render_form_html(content, None, {}) == ""
        assert render_form_html(content, FormSchema(), {}) == ""

    def test_hidden_routing_fields_and_honeypot(self):
        content = make_content()

        form = render_form_html(content, content.form_schema, {})

        assert 'name="website"' in form
        assert '<input type="hidden" name="domain" value="tetherowhomes.com">' in form
        assert '<input type="hidden" name="slug" value="tetherow-home">' in form
        assert '<input type="hidden" name="type" value="buyer">' in form
        assert 'type="email" id="email"' in form
        assert "Get Access" in form
        assert "hl-form-success" in form

    def test_optional_fields_in_separate_panel(self):
        content = make_content()

        form = render_form_html(content, content.form_schema, {})

        panel_start = form.index("Optional")
        assert form.index('name="timeline"') > panel_start
        assert form.index('name="email"') < panel_start

    def test_step_form_posts_entry_page(self):
        entry = make_content(slug="sell-fast", type="seller")
        step = make_content(slug="sell-fast-2", type="seller", id="page-2")

        form = render_form_html(step, step.form_schema, {}, entry=entry, step_index=0, is_last_step=False)

        assert 'name="slug" value="sell-fast"' in form
        assert 'data-step="0"' in form
        assert "data-last-step" not in form
        assert ">Next</button>" in form

    def test_values_escaped(self):
        content = make_content(form_schema={"fields": [
            {"id": "name", "type": "text", "label": "<b>Name</b>", "placeholder": '"quoted"'},
        ]})

        form = render_form_html(content, content.form_schema, {})

        assert "&lt;b&gt;Name&lt;/b&gt;" in form
        assert "&quot;quoted&quot;" in form


class TestRenderHero:
    """Tests for render_hero_section."""

    def test_default_blocks_show_headline_and_form(self):
        content = make_content()

        hero = render_hero_section(content, grid_placement(None))

        assert "Find your Tetherow home" in hero
        assert "hl-lead-form" in hero
        assert "md:col-span-8" in hero
        assert "grid-template-columns" not in hero

    def test_hidden_form_block_hides_form(self):
        content = make_content(blocks=[
            {"id": "block-hero-headline", "kind": "heroHeadline"},
            {"id": "block-hero-form", "kind": "heroForm", "hidden": True},
        ])

        hero = render_hero_section(content, grid_placement(None))

        assert "Find your Tetherow home" in hero
        assert "hl-lead-form" not in hero

    def test_saved_layout_places_regions(self):
        content = make_content()

        hero = render_hero_section(content, grid_placement(merge_layout([])))

        assert "grid-template-columns: repeat(12, 1fr)" in hero
        assert 'style="grid-column: 1 / span 8; grid-row: 2 / span 5;"' in hero
        assert "form-area" in hero

    def test_hidden_header_leaves_regions_in_place(self):
        layout = merge_layout([{"i": "header-bar", "x": 0, "y": 0, "w": 12, "h": 1, "hidden": True}])

        hero = render_hero_section(make_content(), grid_placement(layout))

        assert 'style="grid-column: 1 / span 8; grid-row: 2 / span 5;"' in hero
        assert 'style="grid-column: 9 / span 4; grid-row: 2 / span 5;"' in hero

    def test_hero_elements_drive_columns(self):
        elements = HeroElementsByColumn(
            left=[{"id": "block-rich", "kind": "heroLeftRichText", "column": "left"}],
            right=[],
        )
        sections = with_hero_elements(
            [SectionConfig(id="section-hero", kind="hero", props={"leftMainHtml": "<p>Luxury <script>x</script></p>"})],
            elements,
        )
        content = make_content(sections=sections)

        hero = render_hero_section(content, grid_placement(None))

        assert "<p>Luxury x</p>" in hero
        assert "<script>x" not in hero
        assert "hl-lead-form" not in hero

    def test_hero_image_background(self):
        content = make_content(hero_image_url="https://cdn.example.com/hero.jpg")

        hero = render_hero_section(content, grid_placement(None))

        assert 'src="https://cdn.example.com/hero.jpg"' in hero


class TestRenderLandingPage:
    """Tests for render_landing_page."""

    def test_document_head(self):
        content = make_content(seo=SeoSettings(
            title="Tetherow listings",
            description="Homes at Tetherow",
            keywords=["bend", "golf"],
            no_index=True,
            schema_markup={"@type": "RealEstateAgent", "name": "</script>"},
        ))

        html = render_landing_page(content)

        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Tetherow listings</title>" in html
        assert '<link rel="canonical" href="https://tetherowhomes.com/tetherow-home">' in html
        assert '<meta name="keywords" content="bend, golf">' in html
        assert '<meta name="robots" content="noindex, nofollow">' in html
        assert "\\u003c/script\\u003e" in html
        assert "--brand-primary: #0f766e" in html

    def test_tracking_only_for_valid_ids(self):
        valid = make_content(domain=DomainBranding(
            hostname="tetherowhomes.com", display_name="T", primary_color="#000",
            accent_color="#fff", ga4_id="G-ABC1234", meta_pixel_id="1234567890",
        ))
        invalid = make_content(domain=DomainBranding(
            hostname="tetherowhomes.com", display_name="T", primary_color="#000",
            accent_color="#fff", ga4_id="G-'); alert(1)//", meta_pixel_id="abc",
        ))

        assert "gtag/js?id=G-ABC1234" in render_landing_page(valid)
        assert "fbq('init', '1234567890')" in render_landing_page(valid)
        assert "googletagmanager.com/gtag" not in render_landing_page(invalid)
        assert "fbq('init'" not in render_landing_page(invalid)

    def test_funnel_renders_one_hero_per_step(self):
        step_two = make_content(id="page-2", slug="sell-fast-2", type="seller", headline="Step two")
        entry = make_content(slug="sell-fast", type="seller")
        entry.multistep_steps = [entry.model_copy(), step_two]

        html = render_landing_page(entry)

        assert 'data-funnel-step="0"' in html
        assert 'data-funnel-step="1" hidden' in html
        assert ">Next</button>" in html
        assert html.count('name="slug" value="sell-fast"') == 2

    def test_footer_and_padding_follow_layout(self):
        content = make_content(page_layout=merge_layout([
            {"i": "footer-bar", "x": 0, "y": 7, "w": 12, "h": 1, "hidden": True},
        ]))

        html = render_landing_page(content)

        assert '<main class="pt-[100px]">' in html
        assert "<footer" not in html

    def test_not_found_page_escapes(self):
        html = render_not_found_page("tetherowhomes.com", "<x>")
        assert "tetherowhomes.com/&lt;x&gt;" in html


class TestSanitizer:
    """Tests for the html sanitizer helpers."""

    def test_rich_text_strips_event_handlers(self):
        cleaned = sanitize_rich_text('<p onclick="x()">Hi <a href="javascript:alert(1)">x</a></p>')
        assert "onclick" not in cleaned
        assert "javascript" not in cleaned

    def test_url_schemes(self):
        assert sanitize_url("javascript:alert(1)") == "#"
        assert sanitize_url(None) == "#"
        assert sanitize_url("https://a.com/?a=1&b=2") == "https://a.com/?a=1&amp;b=2"

    def test_colors(self):
        assert sanitize_color("#abc") == "#abc"
        assert sanitize_color("red; background: url(x)") == "#1f2937"
        assert sanitize_color("rgb(1, 2, 3)") == "rgb(1, 2, 3)"
