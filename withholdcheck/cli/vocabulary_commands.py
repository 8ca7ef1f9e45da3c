"""Vocabulary CLI commands - inspect the label variants used for each calculator."""

import click

from withholdcheck.sdk import VocabularyError, get_vocabulary_path, load_vocabulary


@click.group()
def vocabulary():
    """Inspect the label vocabulary (vocabulary.yaml).

    \b
    Resolution order:
    1. settings.json 'vocabulary' key
    2. vocabulary.yaml in the config directory
    3. packaged default
    """
    pass


@vocabulary.command("show")
@click.argument("source", required=False)
def vocabulary_show(source):
    """Show label variants for every source, or only SOURCE."""
    try:
        vocab = load_vocabulary()
    except VocabularyError as e:
        raise click.ClickException(str(e))

    if source and source not in vocab.sources:
        raise click.ClickException(
            f"No vocabulary for source '{source}'. Known sources: {', '.join(sorted(vocab.sources))}"
        )

    click.echo(f"Vocabulary: {get_vocabulary_path()}")
    for name, categories in vocab.sources.items():
        if source and name != source:
            continue
        click.echo()
        click.echo(f"{name}:")
        for category, variants in categories.items():
            click.echo(f"  {category.value}: {', '.join(repr(v) for v in variants)}")
