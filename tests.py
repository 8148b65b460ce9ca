import io, os, re, subprocess, sys
import obsidian_blog
from obsidian_blog import Converter

def TEST(str1, str2, image_dir = obsidian_blog.DEFAULT_IMAGE_DIR):
    str1 = obsidian_blog.to_html(str1, image_dir = image_dir)
    assert str1 == str2, "\nexpected:\n" + str2 + "\nbut got:\n" + str1

def run_handler(handler, instr, after_newline = False, image_dir = '/img'):
    c = Converter(image_dir)
    result = c.begin(instr)
    c.para.after_newline = after_newline
    handler(c, c.cursor.read())
    return ''.join(result), c.cursor.pos

def anchor(n):
    return '<a id="footnote-anchor-' + str(n) + '" href="#footnote-' + str(n) + '">[' + str(n) + ']</a>'

def definition(n, text):
    return '<p id="footnote-' + str(n) + '">\n<a href="#footnote-anchor-' + str(n) + '">[' + str(n) + ']</a>\n' + text

def test_plain_text():
    TEST("", "")
    TEST("This is a plain text file.", "This is a plain text file.")
    TEST("This\nis\nsome simple text\nwhich has been spread out\nacross multiple lines.",
         "This\nis\nsome simple text\nwhich has been spread out\nacross multiple lines.")
    TEST("A sentence!", "A sentence!")
    TEST("A\n\n", "A\n")

def test_literal_text_is_unchanged():
    s = "Just words, digits 0123 and marks: ;.,?()&/=+ %\n  indented line\ttab\nend"
    TEST(s, s)

def test_entities():
    TEST("This is a file ' which is <filled> with - HTML \"entities\" of interest.",
         "This is a file &apos; which is &lt;filled&gt; with &ndash; HTML &quot;entities&quot; of interest.")

def test_headers():
    TEST("# This is an h1 header", "<h1> This is an h1 header</h1>")
    TEST("## This is an h2 header", "<h2> This is an h2 header</h2>")
    TEST("### Title", "<h3> Title</h3>")
    TEST("### This is an ### h3 ### header", "<h3> This is an ### h3 ### header</h3>")
    TEST("# A header with html < > \" ' - elements", "<h1> A header with html &lt; &gt; &quot; &apos; &ndash; elements</h1>")
    TEST("Not # a header", "Not # a header")
    TEST("#tag and text", "#tag and text")
    TEST("##", "##")
    TEST("line\n# Header", "line\n<h1> Header</h1>")
    TEST("#### four", "<h4> four</h4>")
    TEST("###### six", "<h6> six</h6>")
    TEST("####### seven", "####### seven")

def test_paragraphs():
    TEST("A\n\nB", "A\n<p>\nB\n</p>")
    TEST("This is a first line.\n\nParagraph one.", "This is a first line.\n<p>\nParagraph one.\n</p>")
    TEST("This is a first line.\n\nParagraph one.\n\nParagraph two.",
         "This is a first line.\n<p>\nParagraph one.\n</p>\n<p>\nParagraph two.\n</p>")
    TEST("# Introduction\n\n## A Small File\n\nThis is a *small* file.",
         "<h1> Introduction</h1>\n<p>\n<h2> A Small File</h2>\n</p>\n<p>\nThis is a <i>small</i> file.\n</p>")

def test_emphasis():
    TEST("*italic text*", "<i>italic text</i>")
    TEST("**bold text**", "<b>bold text</b>")
    TEST("***bold text***", "<i><b>bold text</b></i>")
    TEST("**a*b**", "<b>a*b</b>")
    TEST("*never closed", "<i>never closed</i>")
    TEST("ends with *", "ends with *")
    TEST("****", "****")
    TEST("*it's*", "<i>it&apos;s</i>")

def test_inline_code():
    TEST("``", "")
    TEST("`This is a simple inline code block`", "<code>This is a simple inline code block</code>")
    TEST("This is some text surrounding `and inline code block`.",
         "This is some text surrounding <code>and inline code block</code>.")
    TEST("This file contains `a code block` with `a number of ' <> - \" ` html entities in it.",
         "This file contains <code>a code block</code> with <code>a number of &apos; &lt;&gt; &ndash; &quot; </code> html entities in it.")
    TEST("`unterminated", "<code>unterminated</code>")

def test_fenced_code():
    TEST("```programming_language\nThis is a multiline code block.\nLine one,\nLine two,\nLine three.\n```",
         "<pre><code>\nThis is a multiline code block.\nLine one,\nLine two,\nLine three.\n</code></pre>")
    TEST("```some programming language\nThis is a line.\n\nHere is another line. It should not be in paragraph tags.\n\nA final line.\n```",
         "<pre><code>\nThis is a line.\n\nHere is another line. It should not be in paragraph tags.\n\nA final line.\n</code></pre>")
    TEST("```\n- dashboard\n| - frontend\n| - backend\n```",
         "<pre><code>\n- dashboard\n| - frontend\n| - backend\n</code></pre>")
    TEST("```js\nimport * as echarts from 'echarts';\n```",
         "<pre><code>\nimport * as echarts from 'echarts';\n</code></pre>")
    TEST("```\n# not a header\n*x* [^1] ![[a.png]] <b> \"q\" `tick` ``two``\n```",
         "<pre><code>\n# not a header\n*x* [^1] ![[a.png]] <b> \"q\" `tick` ``two``\n</code></pre>")
    TEST("```\nnever closed", "<pre><code>\nnever closed</code></pre>")
    TEST("This is a line.\n\nHere is a multi-line code block:\n\n```code\nLine one,\n\nLine two,\n\nline three.\n```\n\nThat's the end of the code block.",
         "This is a line.\n<p>\nHere is a multi&ndash;line code block:\n</p>\n<p>\n<pre><code>\nLine one,\n\nLine two,\n\nline three.\n</code></pre>\n</p>\n<p>\nThat&apos;s the end of the code block.\n</p>")

def test_inline_footnotes():
    TEST("Here is a footnote.[^1]", "Here is a footnote." + anchor(1))
    TEST("Here is a footnote[^1] and another footnote.[^2]",
         "Here is a footnote" + anchor(1) + " and another footnote." + anchor(2))
    TEST("Here is a footnote[^2] and another footnote.[^1]",
         "Here is a footnote" + anchor(1) + " and another footnote." + anchor(2))
    TEST("Same[^7] note[^3] twice[^7]", "Same" + anchor(1) + " note" + anchor(2) + " twice" + anchor(1))
    TEST("[^01] and [^1]", anchor(1) + " and " + anchor(1))
    TEST("a[^" + "1" * 5000 + "]", "a" + anchor(1))
    TEST("# This is a heading\n\nHere is a footnote.[^2] Here's another.[^1]",
         "<h1> This is a heading</h1>\n<p>\nHere is a footnote." + anchor(1) + " Here&apos;s another." + anchor(2) + "\n</p>")

def test_not_footnotes():
    TEST("[link](http://x)", "[link](http://x)")
    TEST("[^note]", "[^note]")
    TEST("[^]", "[^]")
    TEST("[^12", "[^12")
    TEST("[[", "[[")
    TEST("[^\u0661]", "[^\u0661]")

def test_footnote_definitions():
    TEST("Throwaway line\n\nThis paragraph references a footnote.[^1]\n\n[^1]: This is the reference.",
         "Throwaway line\n<p>\nThis paragraph references a footnote." + anchor(1) + "\n</p>\n\n"
         + definition(1, " This is the reference.\n</p>"))
    TEST("Throwaway line\n\nThis paragraph references a footnote.[^1]\n\n[^1]: This is the reference, it has a url: https://this-is-not-a-real-url.blue/database?query=#a-query.",
         "Throwaway line\n<p>\nThis paragraph references a footnote." + anchor(1) + "\n</p>\n\n"
         + definition(1, " This is the reference, it has a url: https://this&ndash;is&ndash;not&ndash;a&ndash;real&ndash;url.blue/database?query=#a&ndash;query.\n</p>"))

def test_footnotes_renumbered():
    TEST("a[^2] b[^1]\n\n[^1]: one\n[^2]: two",
         "a" + anchor(1) + " b" + anchor(2) + "\n\n"
         + definition(2, " one\n</p>\n")
         + definition(1, " two\n</p>"))
    TEST("Throwaway line\n\nThis paragraph references a footnote.[^2]\n\nThis paragraph[^1] also has a footnote.\n\n[^1]: This is the reference.\n[^2]: This is a footnote.",
         "Throwaway line\n<p>\nThis paragraph references a footnote." + anchor(1) + "\n</p>\n<p>\nThis paragraph" + anchor(2) + " also has a footnote.\n</p>\n\n"
         + definition(2, " This is the reference.\n</p>\n")
         + definition(1, " This is a footnote.\n</p>"))

def test_double_digit_footnotes():
    refs = ''.join("[^" + str(i) + "]\n" for i in range(1, 13))
    defs = "\n".join("[^" + str(i) + "]: " + str(i) for i in range(1, 13))
    expected = "Throwaway line\n\n" + ''.join(anchor(i) + "\n" for i in range(1, 13)) + "\n" \
             + "\n".join(definition(i, " " + str(i) + "\n</p>") for i in range(1, 13))
    TEST("Throwaway line\n\n" + refs + "\n" + defs, expected)

def test_orphan_footnote_definition_gets_next_number():
    TEST("a[^5]\n\n[^5]: five\n[^9]: nine",
         "a" + anchor(1) + "\n\n" + definition(1, " five\n</p>\n") + definition(2, " nine\n</p>"))

def test_footnote_numbering_restarts_for_every_conversion():
    c = Converter()
    assert c.to_html("x[^4]") == "x" + anchor(1)
    assert c.to_html("y[^9][^4]") == "y" + anchor(1) + anchor(2)

def test_unordered_lists():
    TEST("# Unordered List!\n\n- This is an unordered list with a - dash.\n- One,\n- Two,\n- Three.",
         "<h1> Unordered List!</h1>\n<p>\n<ul>\n<li> This is an unordered list with a &ndash; dash.</li>\n<li> One,</li>\n<li> Two,</li>\n<li> Three.</li>\n</ul>\n</p>")
    TEST("# Header\n\n- Unordered\n- List\n\nEnd of file.",
         "<h1> Header</h1>\n<p>\n<ul>\n<li> Unordered</li>\n<li> List</li>\n</ul>\n</p>\n<p>\nEnd of file.\n</p>")
    TEST("For example:\n\n- paragraphs[^1]\n- \"0 < 1\"\n- \"2 > 1\"\n- **and**\n- ***headings***\n- `Code blocks`",
         "For example:\n<p>\n<ul>\n<li> paragraphs" + anchor(1) + "</li>\n<li> &quot;0 &lt; 1&quot;</li>\n<li> &quot;2 &gt; 1&quot;</li>\n<li> <b>and</b></li>\n<li> <i><b>headings</b></i></li>\n<li> <code>Code blocks</code></li>\n</ul>\n</p>")
    TEST("x\n- a\n", "x\n<ul>\n<li> a</li>\n</ul>")
    TEST("x\n- a\nb", "x\n<ul>\n<li> a</li>\n</ul>\nb")
    TEST("x\n- a\n# H", "x\n<ul>\n<li> a</li>\n</ul>\n<h1> H</h1>")
    TEST("x\n\n- a\n- b\nc\n\nd", "x\n<p>\n<ul>\n<li> a</li>\n<li> b</li>\n</ul>\nc\n</p>\n<p>\nd\n</p>")
    TEST("- at the very start", "&ndash; at the very start")

def test_tables():
    head = "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> Table </th>\n<th> Head </th>\n</tr>\n</thead>\n<tbody>\n"
    TEST("| Table | Head |", head + "</tbody>\n</table>")
    TEST("| Table | Head |\n|--|--|", head + "</tbody>\n</table>")
    TEST("| col name one | col name two |\n|-|-|\n| row contents one | row contents two |",
         "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> col name one </th>\n<th> col name two </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> row contents one </td>\n<td> row contents two </td>\n</tr>\n</tbody>\n</table>")
    TEST("| col name one | col name two |\n|-|-|\n| A non-entity / | Some entities - ' |\n| < More entities > | \"And I quote...\" |",
         "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> col name one </th>\n<th> col name two </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> A non&ndash;entity / </td>\n<td> Some entities &ndash; &apos; </td>\n</tr>\n<tr>\n<td> &lt; More entities &gt; </td>\n<td> &quot;And I quote...&quot; </td>\n</tr>\n</tbody>\n</table>")
    TEST("| a | b\n|-|-|\n| c", "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> a </th>\n<th> b</th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> c</td>\n</tr>\n</tbody>\n</table>")
    TEST("| a |\n|-|\n| b |\ntext", "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> a </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> b </td>\n</tr>\n</tbody>\n</table>\ntext")
    TEST("| a |\n|-|\n| b |\n# H", "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> a </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> b </td>\n</tr>\n</tbody>\n</table>\n<h1> H</h1>")

def test_images():
    TEST("![[image_name.png]]", "<figure class=\"image\">\n<img src=\"/directory_name/image_name.png\">\n</figure>")
    TEST("![[pic.png]]", "<figure class=\"image\">\n<img src=\"/img/pic.png\">\n</figure>", image_dir = '/img')
    TEST("# Introduction\n\n![[image_name.png]]\n\nFor example:",
         "<h1> Introduction</h1>\n<p>\n<figure class=\"image\">\n<img src=\"/directory_name/image_name.png\">\n</figure>\n</p>\n<p>\nFor example:\n</p>")
    TEST("Wow![x]", "Wow![x]")
    TEST("![[never closed\nnext", "![[never closed\nnext")

INTEGRATION_MD = "# Introduction\n\n## A Small File\n\nThis is a *small* file. It contains - neigh - requires the program to correctly translate a variety of different Obsidian Markdown elements into the HTML elements I want.\n\n![[image_name.png]]\n\nFor example:\n\n- paragraphs[^1]\n- \"0 < 1\"\n- \"2 > 1\"\n- **and**\n- ***headings***\n- `Code blocks`\n\n```Pseudocode\nfn removeCharacterFromList(remList list, charToRemove char) list {\n    match remList {\n        case x::[]:\n            match x {\n                charToRemove: []\n                _: x\n            }\n        case x::xs:\n            match x {\n                charToRemove: removeCharacterFromList(xs, charToRemove)\n                _: x::removeCharacterFromList(xs, charToRemove)\n            }\n    }\n}\n\nremoveCharacterFromList(['a', 'b', 'c'], 'a')\n```\n\n## A table conclusion\n\nAnother footnote.[^2]\n\n| A table | must have | columns |\n|--|--|--|\n| and rows. | which may have an arbitrary amount of content | |\n\n[^1]: With footnotes!\n[^2]: Pseudocode."

def test_small_file():
    TEST(INTEGRATION_MD, "<h1> Introduction</h1>\n<p>\n<h2> A Small File</h2>\n</p>\n<p>\nThis is a <i>small</i> file. It contains &ndash; neigh &ndash; requires the program to correctly translate a variety of different Obsidian Markdown elements into the HTML elements I want.\n</p>\n<p>\n<figure class=\"image\">\n<img src=\"/directory_name/image_name.png\">\n</figure>\n</p>\n<p>\nFor example:\n</p>\n<p>\n<ul>\n<li> paragraphs" + anchor(1) + "</li>\n<li> &quot;0 &lt; 1&quot;</li>\n<li> &quot;2 &gt; 1&quot;</li>\n<li> <b>and</b></li>\n<li> <i><b>headings</b></i></li>\n<li> <code>Code blocks</code></li>\n</ul>\n</p>\n<p>\n<pre><code>\nfn removeCharacterFromList(remList list, charToRemove char) list {\n    match remList {\n        case x::[]:\n            match x {\n                charToRemove: []\n                _: x\n            }\n        case x::xs:\n            match x {\n                charToRemove: removeCharacterFromList(xs, charToRemove)\n                _: x::removeCharacterFromList(xs, charToRemove)\n            }\n    }\n}\n\nremoveCharacterFromList(['a', 'b', 'c'], 'a')\n</code></pre>\n</p>\n<p>\n<h2> A table conclusion</h2>\n</p>\n<p>\nAnother footnote." + anchor(2) + "\n</p>\n<p>\n<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> A table </th>\n<th> must have </th>\n<th> columns </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> and rows. </td>\n<td> which may have an arbitrary amount of content </td>\n<td> </td>\n</tr>\n</tbody>\n</table>\n</p>\n"
         + definition(1, " With footnotes!\n</p>\n") + definition(2, " Pseudocode.\n</p>"))

def test_tags_balanced_for_every_truncation():
    for end in range(len(INTEGRATION_MD) + 1):
        html = obsidian_blog.to_html(INTEGRATION_MD[:end])
        opened = [t for t in re.findall(r'<(\w+)[ >]', html) if t != 'img']
        closed = re.findall(r'</(\w+)>', html)
        for tag in set(opened) | set(closed):
            assert opened.count(tag) == closed.count(tag), (tag, INTEGRATION_MD[:end])

def test_write_to_file():
    f = io.StringIO()
    assert obsidian_blog.to_html("*a*\n\nb", f) == ''
    assert f.getvalue() == "<i>a</i>\n<p>\nb\n</p>"

def test_header_handler_consumes_its_line():
    assert run_handler(Converter.add_header_or_pound, "## Two\nnext") == ("<h2> Two</h2>", 7)
    assert run_handler(Converter.add_header_or_pound, "#tag") == ("#", 1)

def test_inline_handlers_stop_after_their_closing_run():
    assert run_handler(Converter.add_emphasis, "**b** rest") == ("<b>b</b>", 5)
    assert run_handler(Converter.add_code, "`x` y") == ("<code>x</code>", 3)
    assert run_handler(Converter.add_code, "```py\na<b\n```\nafter") == ("<pre><code>\na<b\n</code></pre>", 13)

def test_footnote_handler_consumption():
    assert run_handler(Converter.add_footnote, "[x]") == ("[", 1)
    assert run_handler(Converter.add_footnote, "[^12] z") == (anchor(1), 5)
    assert run_handler(Converter.add_footnote, "[^3]: text\nmore") == (definition(1, " text\n</p>\n"), 11)

def test_block_handlers_push_back_the_blank_line():
    assert run_handler(Converter.add_table, "| a |\n|-|\n| b |\n\nrest") == (
        "<table class=\"table is-hoverable\">\n<thead>\n<tr>\n<th> a </th>\n</tr>\n</thead>\n<tbody>\n<tr>\n<td> b </td>\n</tr>\n</tbody>\n</table>", 16)
    assert run_handler(Converter.add_list_or_dash, "- a\n- b\n\nx", after_newline = True) == (
        "<ul>\n<li> a</li>\n<li> b</li>\n</ul>", 8)

def test_image_handler_restores_cursor():
    assert run_handler(Converter.add_image, "![[a.png]]\nx") == ("<figure class=\"image\">\n<img src=\"/img/a.png\">\n</figure>", 11)
    assert run_handler(Converter.add_image, "![x") == ("!", 1)

SCRIPT = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'obsidian_blog.py')

def test_command_line(tmp_path):
    infile = tmp_path / 'post.md'
    outfile = tmp_path / 'post.html'
    infile.write_bytes("# Title\r\n\r\n![[p.png]]\r\n".encode('utf-8'))
    proc = subprocess.run([sys.executable, SCRIPT, str(infile), str(outfile), '/blog/img'], capture_output = True, text = True)
    assert proc.returncode == 0
    html = "<h1> Title</h1>\n<p>\n<figure class=\"image\">\n<img src=\"/blog/img/p.png\">\n</figure>\n</p>"
    assert outfile.read_text(encoding = 'utf-8') == html
    assert proc.stdout.strip() == 'wrote ' + str(len(html)) + ' bytes to file'

def test_command_line_errors(tmp_path):
    proc = subprocess.run([sys.executable, SCRIPT], capture_output = True, text = True)
    assert proc.returncode == 0 and proc.stdout.startswith('Usage:')
    missing = str(tmp_path / 'missing.md')
    proc = subprocess.run([sys.executable, SCRIPT, missing, str(tmp_path / 'out.html'), '/img'], capture_output = True, text = True)
    assert proc.returncode == 1
    assert "Can't open file '" + missing + "'" in proc.stderr
