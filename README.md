# ta27parse

A pure-Python tokenizer for Python 2.7 source code, including `# type:`
comments and `# type: ignore` markers, together with source decoding
helpers and the grammar tables an LL(1) parser works from.

## Modules

- `ta27parse.tokens`: the `Token` and `ErrorCode` enumerations,
  operator lookup (`one_char`, `two_chars`, `three_chars`), `token_name`,
  `is_terminal` and `is_nonterminal`.
- `ta27parse.decoding`: newline translation (`translate_newlines`),
  coding-declaration detection (`get_coding_spec`, `get_normal_name`),
  UTF-8 byte order mark handling (`decode_source`, which returns a
  `DecodedSource`), and `restore_encoding` for error reports. A
  declaration that cannot be honoured raises `DecodeError`, a
  `SyntaxError` subclass.
- `ta27parse.tokenizer`: the `Tokenizer` class, the `TokenInfo` record and
  the `tokenize` convenience function. It tracks INDENT/DEDENT, honours
  tab-size comments (`tab-width:`, `:tabstop=`, `:ts=`, `set tabsize=`)
  and recognises type comments.
- `ta27parse.grammar`: grammar tables: `Grammar`, `DFA`, `State`, `Arc`,
  `Label`, `label_repr` and `Bitset`, with label translation and the
  per-state accelerator tables.

## Installing

```
pip install ta27parse
```

## Tokenizing

```python
from ta27parse.tokenizer import tokenize
from ta27parse.tokens import token_name

for tok in tokenize("def f(x):  # type: (int) -> int\n    return x\n", True):
    print(token_name(tok.type), repr(tok.string), tok.lineno, tok.col_offset)
```

`tokenize` returns a list that ends with `ENDMARKER`. A `str` is read as
UTF-8 and its coding declarations are ignored; `bytes` may carry a UTF-8
byte order mark or a coding declaration on the first or second line.
Type comments appear as `TYPE_COMMENT` tokens holding the text after
`# type: `, and `# type: ignore` comments as `TYPE_IGNORE` tokens holding
whatever follows `ignore`. When the source cannot be split, `tokenize`
raises `SyntaxError`, `IndentationError` or `TabError` with the file
name, line, offset and line text.

For step-by-step use, create a tokenizer with `Tokenizer.from_string`
(bytes, coding declarations honoured) or `Tokenizer.from_utf8`, then call
`get()` or iterate over it. On an `ERRORTOKEN` the reason is in the
tokenizer's `done` attribute, an `ErrorCode`.

## Decoding

```python
from ta27parse.decoding import decode_source, get_coding_spec

get_coding_spec("# coding: utf_8")          # 'utf-8'
src = decode_source(b"# -*- coding: latin-1 -*-\nx = 1\n", True)
src.encoding                                 # 'iso-8859-1'
```

Sources declared in an encoding other than UTF-8 or Latin-1 are recoded
to UTF-8 in `DecodedSource.data`.

## Grammar tables

A `Grammar` holds one `DFA` per rule and a shared label list. Rules are
added with `Grammar.add_dfa`, states and arcs with `DFA.add_state` and
`DFA.add_arc`, and labels with `Grammar.add_label`.
`Grammar.translate_labels` turns rule names and quoted keywords or
operators into symbol and token types. Once each DFA has its `first`
bitset, `Grammar.add_accelerators` builds the lookup table of every
state; `Grammar.remove_accelerators` drops them again. Non-terminal
symbols are numbered from `tokens.NT_OFFSET` (256), and
`Grammar.find_dfa` finds a rule's DFA by that number.

## What this package does not do

The package stops at tokens and grammar tables. It contains no parser
that consumes tokens against a grammar, no concrete syntax tree, no
abstract syntax tree, and no ready-made Python 2.7 grammar; the grammar
tables must be supplied by the caller. There is no command-line tool.

## Running the tests

```
pip install ta27parse[test]
pytest
```