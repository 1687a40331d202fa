from typing import Mapping

from jinja2 import BaseLoader, Environment, select_autoescape

from .factory import DataTableFactory

TABLE_TEMPLATE = """\
<table id="{{ table.get_html_id() or '' }}" class="table table-striped table-bordered" cellspacing="0" width="100%"
       data-url="{{ table.get_ajax_url() or '' }}">
    <thead>
    <tr>
        {%- for head in headers %}
        <th class="">{{ head }}</th>
        {%- endfor %}
    </tr>
    </thead>
</table>
"""

_env = Environment(loader=BaseLoader(), autoescape=select_autoescape(default_for_string=True))
_template = _env.from_string(TABLE_TEMPLATE)


def render_table(table: DataTableFactory) -> str:
    """Renders the table skeleton; rows are drawn client-side from the AJAX response."""
    headers = table.get_headers() or []
    if isinstance(headers, Mapping):
        headers = list(headers.values())
    return _template.render(table=table, headers=headers)
