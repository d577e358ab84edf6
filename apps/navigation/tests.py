"""
Navigation App Tests

Tests for the {% active_link %} tag and the pages rendering the header.
"""
from django.template import Context, Template, TemplateSyntaxError
from django.test import RequestFactory, SimpleTestCase

from apps.navigation.templatetags.active_link import decorate_child, resolve_class_name


def render(template_string, path=None, **extra):
    context = dict(extra)
    if path is not None:
        context['request'] = RequestFactory().get(path)
    return Template('{% load active_link %}' + template_string).render(Context(context))


class ResolveClassNameTests(SimpleTestCase):

    def test_exact_match_is_active(self):
        self.assertEqual(resolve_class_name('/a', '/a', 'active'), 'active')

    def test_other_path_is_not_active(self):
        self.assertEqual(resolve_class_name('/b', '/a', 'active'), '')

    def test_prefix_is_not_a_match(self):
        self.assertEqual(resolve_class_name('/posts/1', '/posts', 'active'), '')
        self.assertEqual(resolve_class_name('/posts/', '/posts', 'active'), '')

    def test_no_current_path(self):
        self.assertEqual(resolve_class_name(None, '/', 'active'), '')


class DecorateChildTests(SimpleTestCase):

    def test_adds_class(self):
        self.assertEqual(decorate_child('<span>Home</span>', 'active'), '<span class="active">Home</span>')

    def test_replaces_existing_class(self):
        self.assertEqual(
            decorate_child('<span class="old" id="x">Home</span>', ''),
            '<span class="" id="x">Home</span>',
        )

    def test_self_closing_element(self):
        self.assertEqual(decorate_child('<img src="/a.png"/>', 'on'), '<img class="on" src="/a.png"/>')

    def test_escapes_class_name(self):
        self.assertEqual(decorate_child('<b>x</b>', '"x'), '<b class="&quot;x">x</b>')

    def test_plain_text_is_unchanged(self):
        self.assertEqual(decorate_child('Home', 'active'), 'Home')


class ActiveLinkTagTests(SimpleTestCase):

    def test_active_when_path_matches(self):
        html = render("{% active_link '/a' 'active' %}<span>A</span>{% endactive_link %}", path='/a')
        self.assertEqual(html, '<a href="/a"><span class="active">A</span></a>')

    def test_empty_class_when_path_differs(self):
        html = render("{% active_link '/a' 'active' %}<span>A</span>{% endactive_link %}", path='/b')
        self.assertEqual(html, '<a href="/a"><span class="">A</span></a>')

    def test_arguments_resolve_from_context(self):
        html = render(
            '{% active_link target css %}<span>A</span>{% endactive_link %}',
            path='/a',
            target='/a',
            css='is-current',
        )
        self.assertIn('class="is-current"', html)

    def test_without_request_nothing_is_active(self):
        html = render("{% active_link '/a' 'active' %}<span>A</span>{% endactive_link %}")
        self.assertEqual(html, '<a href="/a"><span class="">A</span></a>')

    def test_query_string_does_not_affect_match(self):
        html = render("{% active_link '/a' 'active' %}<span>A</span>{% endactive_link %}", path='/a?page=2')
        self.assertIn('class="active"', html)

    def test_wrong_argument_count(self):
        with self.assertRaises(TemplateSyntaxError):
            render("{% active_link '/a' %}<span>A</span>{% endactive_link %}")


class HeaderPagesTests(SimpleTestCase):

    def test_home_highlights_home_link(self):
        response = self.client.get('/')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<a href="/"><span class="active">Home</span></a>', html=True)
        self.assertContains(response, '<a href="/posts"><span class="">Posts</span></a>', html=True)

    def test_posts_highlights_posts_link(self):
        response = self.client.get('/posts')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<a href="/"><span class="">Home</span></a>', html=True)
        self.assertContains(response, '<a href="/posts"><span class="active">Posts</span></a>', html=True)
