"""Shared builders for plan text and parsed plans."""

from tf_prism.core.plan import Action, Plan, Resource, split_address

_PHRASE_SYMBOLS = {
    "will be created": "+",
    "will be destroyed": "-",
    "will be updated in-place": "~",
    "must be replaced": "-/+",
    "will be read during apply": "<=",
}


def resource_block(address, phrase="will be created", body=None):
    """Render one current-layout resource block.

    Args:
        address: Resource address, e.g. "aws_instance.web"
        phrase: Header phrase following the address
        body: Attribute lines (already indented); defaults to one ami line

    Returns:
        The block as a list of lines, header first and closing brace last.
    """
    symbol = _PHRASE_SYMBOLS.get(phrase, "~")
    type_, name = split_address(address)
    if body is None:
        body = ['      + ami           = "ami-123"']
    return [
        f"  # {address} {phrase}",
        f'  {symbol} resource "{type_}" "{name}" {{',
        *body,
        "    }",
    ]


def plan_text(*blocks, summary=None):
    """Join resource blocks into a full plan report.

    summary: (add, change, destroy) tuple, or None to omit the Plan: line.
    """
    lines = [
        "Terraform will perform the following actions:",
        "",
    ]
    for block in blocks:
        lines.extend(block)
        lines.append("")
    if summary is not None:
        add, change, destroy = summary
        lines.append(f"Plan: {add} to add, {change} to change, {destroy} to destroy.")
    return "\n".join(lines)


def make_resource(address, action=Action.CREATE, body=()):
    """Build a Resource directly, bypassing the parser."""
    type_, name = split_address(address)
    header = f"  # {address} will be changed"
    return Resource(
        address=address,
        action=action,
        raw_lines=(header, *body),
        type=type_,
        name=name,
    )


def make_plan(*resources, summary=""):
    return Plan(resources=tuple(resources), summary=summary)


def mixed_plan():
    """Six resources across four actions, in a deliberately unsorted order."""
    return make_plan(
        make_resource("aws_s3_bucket.logs", Action.CREATE, ("    bucket = \"logs\"",)),
        make_resource("aws_instance.web", Action.UPDATE, ("  ~ ami = \"a\" -> \"b\"",)),
        make_resource("aws_lambda_function.example", Action.CREATE),
        make_resource("aws_iam_role.old", Action.DESTROY, ("  - name = \"old\"",)),
        make_resource("aws_instance.api", Action.REPLACE),
        make_resource("aws_db_instance.main", Action.UPDATE),
    )
