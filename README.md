# ursheet

A tiny spreadsheet that reads a plain-text sheet, evaluates its cells and
prints the result as an aligned table.

## Installing

```
pip install .
```

## Running

```
ursh -s budget.txt -d 2
```

* `-s <sheet>`: the sheet file to read (required)
* `-d <decimal-precision>`: digits shown after the decimal point for
  numbers, default 1
* `-h`: print the usage line and exit

Messages go to standard error. The command exits with status 1 when the
options are wrong, the file cannot be read or the sheet is too large, and
0 otherwise.

## Sheet format

Each line is a row, and every row must end with a line break; text after
the last line break is ignored. Each cell ends with `|`. Spaces and tabs
are ignored. A cell may hold:

* a number: `42`, `-3.5`, `1e3`
* text in double quotes: `"Rent"`
* a reference to an earlier cell: `@a0`, `@B2`, `@ab3` (one or two column
  letters, then the row number, counting from 0); the cell takes a copy of
  the referenced cell
* an expression starting with `=`: `= @b0 + @b1 * 2`, using numbers,
  references to earlier number cells, `+ - * /` and parentheses;
  `*` and `/` bind tighter than `+` and `-`
* `^`: a copy of the cell directly above; if that cell is an expression
  that uses references, the references are shifted down one row and the
  expression is worked out again

```
"Item" | "Cost" |
"Rent" | 800    |
"Food" | 250    |
"Sum"  | = @b1 + @b2 |
```

Each column is padded to its widest cell. Empty cells print as a single
space.

A cell that cannot be evaluated shows one of these errors:

* `!overflow`: more than 64 tokens in the cell
* `!unknown`: a character that is not part of the format
* `!malformed`: tokens that do not make a valid value or expression, or an
  expression referring to a cell that is not a number
* `!bounds`: a reference outside the sheet
* `!premature`: a reference to the cell itself or to a cell after it, or
  `^` in the first row

A sheet may have fewer than 701 columns and fewer than 1024 rows.

## Use as a library

```python
from ursheet.sheet import Sheet

sheet = Sheet('1 | 2 | = @a0 + @b0 |\n', precision=2)
print(sheet.cell(0, 2).value)   # 3.0
print(sheet.render())
```

`Sheet.cell(row, col)` returns a `Cell` from `ursheet.model`, whose `kind`
is a `CellKind` (`EMPTY`, `ERROR`, `NUMBER` or `TEXT`) and whose `value` is
the number, the text or the error label. `Sheet.render()` returns the table
exactly as the command prints it. `ursheet.sheet.table_dimensions(src)`
returns the `(rows, cols)` a source text would give, and
`ursheet.sheet.SheetError` is raised for sheets that are too large.

## What it does not do

The sheet is read and printed only: there is no editing, no saving back to
a file and no recalculation after the first pass.