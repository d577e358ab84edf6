"""
{% active_link %} - navigation link that highlights the current route.

Usage:
    {% load active_link %}
    {% active_link '/posts' 'active' %}<span>Posts</span>{% endactive_link %}

Renders ``<a href="/posts"><span class="active">Posts</span></a>`` when the
request path is exactly ``/posts`` and ``<span class="">`` otherwise. The
block must contain a single element.
"""
import re

from django import template
from django.utils.html import escape, format_html
from django.utils.safestring import mark_safe

register = template.Library()

_OPENING_TAG = re.compile(r'^(\s*<[A-Za-z][\w:-]*)([^>]*?)(\s*/?>)', re.DOTALL)
_CLASS_ATTR = re.compile(r'''\s+class\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)''', re.IGNORECASE)


def resolve_class_name(current_path: str | None, href: str, active_class_name: str) -> str:
    """Active class when the current path equals ``href`` exactly, else ''."""
    return active_class_name if current_path == href else ''


def decorate_child(markup: str, class_name: str) -> str:
    """Set ``class`` on the first element of ``markup``, replacing any existing one."""
    match = _OPENING_TAG.match(markup)
    if match is None:
        return markup
    tag, attrs, close = match.groups()
    attrs = _CLASS_ATTR.sub('', attrs)
    opening = f'{tag} class="{escape(class_name)}"{attrs}{close}'
    return opening + markup[match.end():]


class ActiveLinkNode(template.Node):
    def __init__(self, href, active_class_name, nodelist):
        self.href = href
        self.active_class_name = active_class_name
        self.nodelist = nodelist

    def render(self, context):
        href = str(self.href.resolve(context))
        active_class_name = str(self.active_class_name.resolve(context))

        request = context.get('request')
        current_path = request.path if request is not None else None

        class_name = resolve_class_name(current_path, href, active_class_name)
        child = decorate_child(self.nodelist.render(context), class_name)
        return format_html('<a href="{}">{}</a>', href, mark_safe(child))


@register.tag(name='active_link')
def do_active_link(parser, token):
    bits = token.split_contents()
    if len(bits) != 3:
        raise template.TemplateSyntaxError(
            f"'{bits[0]}' takes two arguments: the target path and the active class name"
        )
    nodelist = parser.parse(('endactive_link',))
    parser.delete_first_token()
    return ActiveLinkNode(
        parser.compile_filter(bits[1]),
        parser.compile_filter(bits[2]),
        nodelist,
    )
