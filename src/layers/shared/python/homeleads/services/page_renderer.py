"""Server-side HTML rendering for public landing pages.

Renders the brand header, the hero (headline column plus lead form), the
optional multistep funnel and the SEO head. Admin-authored rich text goes
through the allow-list sanitizer; every other value is escaped.
"""

import os
import re
from typing import Any

from homeleads.models.blocks import BlockConfig, BlockKind, HeroColumn, HeroElementConfig
from homeleads.models.form import FormFieldConfig, FormSchema
from homeleads.models.page import LandingPageContent
from homeleads.services.block_serialization import (
    effective_blocks,
    has_visible_block,
    hero_elements_from_sections,
    hero_section,
    project_hero_column,
)
from homeleads.services.grid_layout import GridPlacement, grid_placement
from homeleads.utils.html_sanitizer import (
    escape_html,
    json_for_script,
    sanitize_color,
    sanitize_rich_text,
    sanitize_url,
)

LEADS_API_PATH = os.environ.get("LEADS_API_PATH", "/public/leads")
RECAPTCHA_SITE_KEY = os.environ.get("RECAPTCHA_SITE_KEY", "")

_GA4_ID_RE = re.compile(r"^G-[A-Z0-9]{4,20}$")
_PIXEL_ID_RE = re.compile(r"^\d{6,20}$")

# Form field type -> <input type>
_INPUT_TYPES = {"email": "email", "phone": "tel", "text": "text", "address": "text"}


def _hero_config(content: LandingPageContent) -> dict[str, Any]:
    section = hero_section(content.sections)
    return dict(section.props) if section else {}


def _render_head(content: LandingPageContent) -> str:
    seo = content.seo
    title = escape_html(content.page_title)
    description = escape_html(seo.description or content.subheadline or "")
    canonical = sanitize_url(content.canonical)
    og_image = seo.og_image_url or content.hero_image_url

    tags = [
        f"<title>{title}</title>",
        f'<meta name="description" content="{description}">',
        f'<link rel="canonical" href="{canonical}">',
        f'<meta property="og:title" content="{title}">',
        f'<meta property="og:description" content="{description}">',
        f'<meta property="og:type" content="{escape_html(seo.og_type or "website")}">',
        f'<meta property="og:url" content="{canonical}">',
        f'<meta name="twitter:card" content="{escape_html(seo.twitter_card or "summary_large_image")}">',
        f'<meta name="twitter:title" content="{title}">',
        f'<meta name="twitter:description" content="{description}">',
    ]
    if seo.keywords:
        tags.append(f'<meta name="keywords" content="{escape_html(", ".join(seo.keywords))}">')
    if og_image:
        tags.append(f'<meta property="og:image" content="{sanitize_url(og_image)}">')
        tags.append(f'<meta name="twitter:image" content="{sanitize_url(og_image)}">')
    if seo.no_index:
        tags.append('<meta name="robots" content="noindex, nofollow">')
    for tag in seo.custom_head_tags or []:
        tags.append(f'<meta name="{escape_html(tag.name)}" content="{escape_html(tag.content)}">')
    if seo.schema_markup:
        tags.append(f'<script type="application/ld+json">{json_for_script(seo.schema_markup)}</script>')

    return "\n    ".join(tags)


def _render_tracking(content: LandingPageContent) -> str:
    """GA4 and Meta Pixel snippets for ids that look valid."""
    snippets = []
    ga4_id = content.domain.ga4_id
    if ga4_id and _GA4_ID_RE.match(ga4_id):
        snippets.append(f"""<script async src="https://www.googletagmanager.com/gtag/js?id={ga4_id}"></script>
    <script>
      window.dataLayer = window.dataLayer || [];
      function gtag(){{dataLayer.push(arguments);}}
      gtag('js', new Date());
      gtag('config', '{ga4_id}');
    </script>""")

    pixel_id = content.domain.meta_pixel_id
    if pixel_id and _PIXEL_ID_RE.match(pixel_id):
        snippets.append(f"""<script>
      !function(f,b,e,v,n,t,s){{if(f.fbq)return;n=f.fbq=function(){{n.callMethod?
      n.callMethod.apply(n,arguments):n.queue.push(arguments)}};if(!f._fbq)f._fbq=n;
      n.push=n;n.loaded=!0;n.version='2.0';n.queue=[];t=b.createElement(e);t.async=!0;
      t.src=v;s=b.getElementsByTagName(e)[0];s.parentNode.insertBefore(t,s)}}(window,
      document,'script','https://connect.facebook.net/en_US/fbevents.js');
      fbq('init', '{pixel_id}');
      fbq('track', 'PageView');
    </script>""")

    return "\n    ".join(snippets)


def _render_brand_header(content: LandingPageContent, overlay: bool) -> str:
    domain = content.domain
    name = escape_html(domain.display_name)
    if domain.logo_url:
        left = f'<img src="{sanitize_url(domain.logo_url)}" alt="{name}" class="h-[60px] w-auto object-contain">'
    else:
        left = f'<span class="text-xs font-medium uppercase tracking-[0.2em] text-zinc-700">{name}</span>'
    right = ""
    if domain.right_logo_url:
        right = f'<img src="{sanitize_url(domain.right_logo_url)}" alt="" class="max-h-[55px] w-auto object-contain">'

    header = f"""<header class="border-b border-zinc-200 bg-white fixed top-0 right-0 left-0 z-[99]">
      <div class="mx-auto flex max-w-6xl flex-col items-center justify-between gap-3 px-4 py-3 md:flex-row md:px-6">
        <div class="flex items-center gap-3">{left}</div>
        <div class="flex items-center">{right}</div>
      </div>
    </header>"""
    if overlay:
        return f'<div class="fixed top-0 left-0 right-0 z-50 max-h-[100px] overflow-hidden">{header}</div>'
    return header


def _render_field(field: FormFieldConfig) -> str:
    field_id = escape_html(field.id)
    label = escape_html(field.label)
    placeholder = escape_html(field.placeholder or "")
    required_attr = "required" if field.required else ""
    star = '<span class="text-red-500">*</span>' if field.required else ""
    helper = f'<p class="mt-1 text-xs text-zinc-300">{escape_html(field.helper_text)}</p>' if field.helper_text else ""
    options = field.options or []
    input_class = "w-full rounded-md border border-zinc-300 bg-white px-3 py-2 text-zinc-900"

    if field.type == "hidden":
        return f'<input type="hidden" name="{field_id}" value="{placeholder}">'

    if field.type == "textarea":
        control = f'<textarea id="{field_id}" name="{field_id}" placeholder="{placeholder}" rows="4" class="{input_class}" {required_attr}></textarea>'
    elif field.type == "select":
        opts = "".join(
            f'<option value="{escape_html(o.value)}">{escape_html(o.label)}</option>' for o in options
        )
        control = f'<select id="{field_id}" name="{field_id}" class="{input_class}" {required_attr}><option value="">{placeholder or "Select..."}</option>{opts}</select>'
    elif field.type == "radio":
        control = "".join(
            f'<label class="flex items-center gap-2"><input type="radio" name="{field_id}" value="{escape_html(o.value)}" {required_attr}><span>{escape_html(o.label)}</span></label>'
            for o in options
        )
        return f'<fieldset class="space-y-2"><legend class="mb-1 font-medium">{label} {star}</legend>{control}{helper}</fieldset>'
    elif field.type == "checkbox":
        if options:
            control = "".join(
                f'<label class="flex items-center gap-2"><input type="checkbox" name="{field_id}" value="{escape_html(o.value)}"><span>{escape_html(o.label)}</span></label>'
                for o in options
            )
            return f'<fieldset class="space-y-2"><legend class="mb-1 font-medium">{label} {star}</legend>{control}{helper}</fieldset>'
        return f'<label class="flex items-center gap-2"><input type="checkbox" id="{field_id}" name="{field_id}" value="true" {required_attr}><span>{label} {star}</span></label>{helper}'
    else:
        input_type = _INPUT_TYPES.get(field.type, "text")
        autocomplete = ' autocomplete="street-address"' if field.type == "address" else ""
        control = f'<input type="{input_type}" id="{field_id}" name="{field_id}" placeholder="{placeholder}" class="{input_class}"{autocomplete} {required_attr}>'

    return f"""<div>
            <label for="{field_id}" class="mb-1 block font-medium">{label} {star}</label>
            {control}{helper}
          </div>"""


def render_form_html(
    content: LandingPageContent,
    form_schema: FormSchema | None,
    hero_config: dict[str, Any],
    entry: LandingPageContent | None = None,
    step_index: int | None = None,
    is_last_step: bool = True,
) -> str:
    """Render the lead form for a page or one funnel step.

    The hidden domain/slug/type fields always carry the funnel entry page,
    which is the page the lead is recorded against.
    """
    if not form_schema or form_schema.is_empty():
        return ""

    owner = entry or content
    required_fields = [f for f in form_schema.ordered_fields() if not f.optional_section]
    optional_fields = [f for f in form_schema.ordered_fields() if f.optional_section]

    fields_html = "\n          ".join(_render_field(f) for f in required_fields)
    optional_html = ""
    if optional_fields:
        optional_html = f"""<div class="rounded-md bg-white/10 p-3 backdrop-blur space-y-3">
          <p class="text-xs uppercase tracking-wide text-zinc-300">Optional</p>
          {"".join(_render_field(f) for f in optional_fields)}
        </div>"""

    cta_style = ""
    if hero_config.get("ctaBgColor"):
        cta_style = f' style="background-color: {sanitize_color(hero_config.get("ctaBgColor"))};"'
    font_style = ""
    if isinstance(hero_config.get("formTextSize"), str) and re.match(r"^\d{1,2}(px|rem)$", hero_config["formTextSize"]):
        font_style = f' style="font-size: {hero_config["formTextSize"]};"'

    cta_label = sanitize_rich_text(content.cta_text) if is_last_step else "Next"
    post_cta = hero_config.get("formPostCtaText")
    post_cta_html = f'<p class="text-xs text-zinc-300">{escape_html(post_cta)}</p>' if post_cta else ""
    step_attr = f' data-step="{step_index}"' if step_index is not None else ""
    last_attr = ' data-last-step="true"' if is_last_step else ""

    return f"""<form class="hl-lead-form space-y-4 text-sm"{font_style}{step_attr}{last_attr} novalidate>
          <input type="text" name="website" class="hidden" tabindex="-1" autocomplete="off">
          <input type="hidden" name="domain" value="{escape_html(owner.domain.hostname)}">
          <input type="hidden" name="slug" value="{escape_html(owner.slug)}">
          <input type="hidden" name="type" value="{escape_html(owner.type)}">
          {fields_html}
          {optional_html}
          <button type="submit" class="w-full rounded-md bg-amber-500 px-4 py-3 font-semibold text-white"{cta_style}>{cta_label}</button>
          {post_cta_html}
          <p class="hl-form-error hidden text-red-300">Something went wrong. Please try again.</p>
        </form>
        <div class="hl-form-success hidden">{sanitize_rich_text(content.success_message)}</div>"""


def _render_left_element(element: HeroElementConfig, content: LandingPageContent, hero_config: dict) -> str:
    if element.kind == BlockKind.HERO_HEADLINE.value:
        return f'<h1 class="text-2xl font-semibold tracking-tight sm:text-3xl md:text-4xl lg:text-5xl">{escape_html(content.headline)}</h1>'
    if element.kind == BlockKind.HERO_SUBHEADLINE.value and content.subheadline:
        return f'<p class="mt-3 text-sm md:text-base text-zinc-200">{escape_html(content.subheadline)}</p>'
    if element.kind == BlockKind.HERO_LEFT_RICH_TEXT.value:
        return f'<div class="space-y-2">{sanitize_rich_text(hero_config.get("leftMainHtml"))}</div>'
    if element.kind == BlockKind.HERO_TRUST_ROW.value:
        items = element.props.get("items") or []
        badges = "".join(f"<li>{escape_html(i)}</li>" for i in items if isinstance(i, str))
        return f'<ul class="flex flex-wrap gap-4 text-xs text-zinc-300">{badges}</ul>' if badges else ""
    if element.kind == BlockKind.HERO_BADGE_STRIP.value:
        images = element.props.get("images") or []
        imgs = "".join(
            f'<img src="{sanitize_url(src)}" alt="" class="h-10 w-auto">' for src in images if isinstance(src, str)
        )
        return f'<div class="flex flex-wrap items-center gap-4">{imgs}</div>' if imgs else ""
    # Forms are rendered by the form column
    return ""


def _render_text_column(
    content: LandingPageContent,
    hero_config: dict,
    left_elements: list[HeroElementConfig] | None,
    blocks: list[BlockConfig],
) -> str:
    left_html = hero_config.get("leftMainHtml")

    if left_elements is not None:
        inner = "\n".join(
            filter(None, (_render_left_element(el, content, hero_config) for el in left_elements))
        )
        return f"""<p class="mb-2 text-[11px] font-semibold uppercase tracking-[0.26em] text-zinc-300">{escape_html(content.domain.display_name)}</p>
          <div class="space-y-2">{inner}</div>"""

    if left_html:
        return f'<div class="space-y-2">{sanitize_rich_text(left_html)}</div>'

    parts = [
        f'<p class="mb-2 text-[11px] font-semibold uppercase tracking-[0.26em] text-zinc-300">{escape_html(content.domain.display_name)}</p>'
    ]
    if has_visible_block(blocks, BlockKind.HERO_HEADLINE):
        parts.append(f'<h1 class="text-2xl font-semibold tracking-tight sm:text-3xl md:text-4xl lg:text-5xl">{escape_html(content.headline)}</h1>')
    if has_visible_block(blocks, BlockKind.HERO_SUBHEADLINE) and content.subheadline:
        parts.append(f'<p class="mt-3 text-sm md:text-base text-zinc-200">{escape_html(content.subheadline)}</p>')
    return "\n          ".join(parts)


def _render_form_column(form_html: str, hero_config: dict) -> str:
    heading = sanitize_rich_text((hero_config.get("formHeading") or "").strip())
    intro = sanitize_rich_text((hero_config.get("formIntro") or "").strip())
    footer = sanitize_rich_text((hero_config.get("formFooterText") or "").strip())
    bg_style = ""
    if hero_config.get("formBgColor"):
        bg_style = f' style="background-color: {sanitize_color(hero_config["formBgColor"])};"'

    return f"""<div class="rounded-lg bg-black/60 p-5 backdrop-blur"{bg_style}>
          {f'<h2 class="mb-2 text-lg font-semibold">{heading}</h2>' if heading else ""}
          {f'<div class="mb-4 text-sm text-zinc-200">{intro}</div>' if intro else ""}
          {form_html}
          {f'<div class="mt-4 text-xs text-zinc-300">{footer}</div>' if footer else ""}
        </div>"""


def render_hero_section(
    content: LandingPageContent,
    placement: GridPlacement,
    entry: LandingPageContent | None = None,
    step_index: int | None = None,
    is_last_step: bool = True,
) -> str:
    """Render the hero for a page (or one funnel step of ``entry``)."""
    hero_config = _hero_config(content)
    blocks = effective_blocks(content.blocks)
    hero_elements = hero_elements_from_sections(content.sections)

    use_elements = hero_elements is not None and bool(hero_elements.all_elements())
    left_elements = project_hero_column(hero_elements, HeroColumn.LEFT) if use_elements else None
    right_elements = project_hero_column(hero_elements, HeroColumn.RIGHT) if use_elements else []

    if use_elements:
        show_text = bool(left_elements)
        show_form = any(el.kind == BlockKind.HERO_FORM.value for el in [*left_elements, *right_elements])
    else:
        show_text = has_visible_block(blocks, BlockKind.HERO_LEFT_RICH_TEXT) or has_visible_block(blocks, BlockKind.HERO_HEADLINE)
        show_form = has_visible_block(blocks, BlockKind.HERO_FORM)

    hero_image = content.hero_image_url or (entry.hero_image_url if entry else None)
    background = ""
    if hero_image:
        background = f"""<div class="pointer-events-none fixed inset-0">
        <img src="{sanitize_url(hero_image)}" alt="{escape_html(content.headline)}" class="h-full w-full object-cover brightness-[0.65] max-h-[1000px]">
      </div>"""

    wrapper_class = "grid items-start md:grid-cols-12 md:items-center" if placement.use_saved_layout else "grid items-start gap-6 md:grid-cols-12 md:gap-8 md:items-center"
    wrapper_style = ' style="display: grid; grid-template-columns: repeat(12, 1fr); gap: 1.5rem 2rem;"' if placement.use_saved_layout else ""
    text_style = f' style="{placement.text_style}"' if placement.text_style else ""
    form_style = f' style="{placement.form_style}"' if placement.form_style else ""

    text_html = ""
    if show_text:
        text_html = f"""<div class="relative mt-0 space-y-4 md:space-y-6 {placement.text_class}"{text_style}>
          {_render_text_column(content, hero_config, left_elements, blocks)}
        </div>"""

    form_html = ""
    if show_form:
        form = render_form_html(content, content.form_schema, hero_config, entry, step_index, is_last_step)
        form_html = f"""<div class="w-full md:w-auto {placement.form_class}"{form_style}>
          {_render_form_column(form, hero_config)}
        </div>"""

    step_attrs = ""
    if step_index is not None:
        step_attrs = f' data-funnel-step="{step_index}"' + ("" if step_index == 0 else " hidden")

    return f"""<section class="relative text-white min-h-[calc(100vh_-_85px)] pt-[120px]"{step_attrs}>
      {background}
      <div class="relative mx-auto flex h-full max-w-6xl flex-col gap-8 px-4 pt-8 pb-6 md:px-0">
        <div class="{wrapper_class}"{wrapper_style}>
          {text_html}
          {form_html}
        </div>
      </div>
    </section>"""


def _render_form_script() -> str:
    """Client script: posts lead forms as JSON and advances funnels."""
    recaptcha_key = json_for_script(RECAPTCHA_SITE_KEY)
    api_path = json_for_script(LEADS_API_PATH)
    return f"""<script>
(function() {{
  var API = {api_path};
  var SITE_KEY = {recaptcha_key};
  var steps = {{}};

  function values(form) {{
    var data = {{}};
    new FormData(form).forEach(function(v, k) {{
      if (data[k] !== undefined) {{ data[k] = [].concat(data[k], v); }} else {{ data[k] = v; }}
    }});
    return data;
  }}

  function token() {{
    if (!SITE_KEY || !window.grecaptcha) return Promise.resolve(null);
    return new Promise(function(resolve) {{
      grecaptcha.ready(function() {{
        grecaptcha.execute(SITE_KEY, {{action: 'lead_submit'}}).then(resolve, function() {{ resolve(null); }});
      }});
    }});
  }}

  function showStep(i) {{
    document.querySelectorAll('[data-funnel-step]').forEach(function(s) {{
      s.hidden = String(i) !== s.getAttribute('data-funnel-step');
    }});
    window.scrollTo(0, 0);
  }}

  document.querySelectorAll('form.hl-lead-form').forEach(function(form) {{
    form.addEventListener('submit', function(e) {{
      e.preventDefault();
      var data = values(form);
      var step = form.getAttribute('data-step');
      if (step !== null && !form.hasAttribute('data-last-step')) {{
        delete data.website; delete data.domain; delete data.slug; delete data.type;
        steps['step' + step] = data;
        showStep(Number(step) + 1);
        return;
      }}
      if (data.website) {{ form.hidden = true; return; }}
      if (Object.keys(steps).length) data._multistepData = JSON.stringify(steps);
      var params = new URLSearchParams(window.location.search);
      ['utm_source', 'utm_medium', 'utm_campaign'].forEach(function(k) {{
        if (params.get(k) && !data[k]) data[k] = params.get(k);
      }});
      token().then(function(t) {{
        if (t) data.recaptchaToken = t;
        return fetch(API, {{method: 'POST', headers: {{'Content-Type': 'application/json'}}, body: JSON.stringify(data)}});
      }}).then(function(res) {{
        if (!res.ok) throw new Error('submit failed');
        form.hidden = true;
        form.nextElementSibling.classList.remove('hidden');
      }}).catch(function() {{
        form.querySelector('.hl-form-error').classList.remove('hidden');
      }});
    }});
  }});
}})();
</script>"""


def render_landing_page(content: LandingPageContent) -> str:
    """Render a resolved page to a complete HTML document.

    Args:
        content: Resolved page content (with funnel steps when present).

    Returns:
        HTML document string.
    """
    placement = grid_placement(content.page_layout)
    primary_color = sanitize_color(content.domain.primary_color)
    accent_color = sanitize_color(content.domain.accent_color, "#f59e0b")

    if content.multistep_steps:
        total = len(content.multistep_steps)
        hero_html = "\n".join(
            render_hero_section(
                step,
                grid_placement(step.page_layout or content.page_layout),
                entry=content,
                step_index=index,
                is_last_step=index == total - 1,
            )
            for index, step in enumerate(content.multistep_steps)
        )
    else:
        hero_html = render_hero_section(content, placement)

    padding = placement.main_padding_class
    main_class = f' class="{padding}"' if padding else ""

    footer_html = ""
    if placement.show_footer:
        footer_html = f"""<footer class="fixed bottom-0 left-0 right-0 z-50 max-h-[100px] border-t border-zinc-200 bg-white">
      <div class="mx-auto flex max-w-6xl items-center justify-center px-4 py-3">
        <span class="text-xs text-zinc-600">{escape_html(content.domain.display_name)}</span>
      </div>
    </footer>"""

    recaptcha_script = ""
    if RECAPTCHA_SITE_KEY:
        recaptcha_script = f'<script src="https://www.google.com/recaptcha/api.js?render={escape_html(RECAPTCHA_SITE_KEY)}" async></script>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    {_render_head(content)}
    <script src="https://cdn.tailwindcss.com"></script>
    <style>:root {{ --brand-primary: {primary_color}; --brand-accent: {accent_color}; }}</style>
    {_render_tracking(content)}
    {recaptcha_script}
</head>
<body class="min-h-screen bg-zinc-50">
    {_render_brand_header(content, overlay=placement.show_header)}
    <main{main_class}>
    {hero_html}
    </main>
    {footer_html}
    {_render_form_script()}
</body>
</html>"""


def render_not_found_page(hostname: str, slug: str) -> str:
    """Minimal 404 document for unknown pages."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="robots" content="noindex">
    <title>Page not found</title>
</head>
<body style="font-family: system-ui, sans-serif; display: flex; align-items: center; justify-content: center; min-height: 100vh; margin: 0;">
    <div style="text-align: center;">
        <h1>Page not found</h1>
        <p>There is no page at {escape_html(hostname)}/{escape_html(slug)}.</p>
    </div>
</body>
</html>"""
