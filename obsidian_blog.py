import sys
from typing import List, IO, Callable, Dict, Tuple
Char = str

EOF = Char('') # what Cursor.read() returns past the end of input

DEFAULT_IMAGE_DIR = '/directory_name'

ENTITIES : Dict[Char, str] = {
    "'": '&apos;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    '-': '&ndash;',
}

EMPHASIS_TAGS : Dict[int, Tuple[str, str]] = {
    1: ('<i>', '</i>'),
    2: ('<b>', '</b>'),
    3: ('<i><b>', '</b></i>'),
}

class Cursor:
    instr : str
    pos : int

    def __init__(self, instr : str):
        self.instr = instr
        self.pos = 0

    def read(self) -> Char:
        # keeps advancing at the end so that unread() always undoes exactly one read()
        ch = self.instr[self.pos] if self.pos < len(self.instr) else EOF
        self.pos += 1
        return ch

    def unread(self):
        self.pos -= 1

    def peek(self) -> Char:
        return self.instr[self.pos] if self.pos < len(self.instr) else EOF

class ParagraphState:
    open : bool          # <p> written, </p> still owed
    after_newline : bool # previous character was a line break, or a block ended at line start
    after_block : bool   # a block swallowed its own line break, so the next <p> needs one more "\n" in front

    def __init__(self):
        self.open = False
        self.after_newline = False
        self.after_block = False

class FootnoteNumbering:
    numbers : Dict[str, int] # digits as written, leading zeros dropped -> number as rendered
    last : int

    def __init__(self):
        self.numbers = {}
        self.last = 0

    def number(self, original : str) -> int:
        original = original.lstrip('0') or '0'
        if original not in self.numbers:
            self.last += 1
            self.numbers[original] = self.last
        return self.numbers[original]

class Converter:
    image_dir : str
    cursor : Cursor
    para : ParagraphState
    footnotes : FootnoteNumbering
    write : Callable[[str], None]

    def __init__(self, image_dir = DEFAULT_IMAGE_DIR):
        self.image_dir = image_dir

    def begin(self, instr : str, outfilef : IO[str] = None) -> List[str]:
        result : List[str] = [] # this should be faster than using regular string
        if outfilef is None:
            self.write = lambda s: result.append(s)
        else:
            self.write = lambda s: outfilef.write(s)

        # everything below is per conversion, so one Converter can be reused
        self.cursor = Cursor(instr)
        self.para = ParagraphState()
        self.footnotes = FootnoteNumbering()
        return result

    def to_html(self, instr : str, outfilef : IO[str] = None) -> str:
        result = self.begin(instr, outfilef)

        while True:
            ch = self.cursor.read()
            if ch == EOF:
                break
            at_line_start = self.dispatch.get(ch, Converter.add_char)(self, ch)
            if not at_line_start: # text went on right after the block, no extra "\n" before the next <p>
                self.para.after_block = False
            self.para.after_newline = at_line_start

        if self.para.open:
            self.write("\n</p>")
            self.para.open = False

        if outfilef is None:
            return ''.join(result)

        return ''

    def write_char(self, ch : Char):
        self.write(ENTITIES.get(ch, ch))

    def read_run(self, ch : Char) -> int:
        n = 0
        while self.cursor.read() == ch:
            n += 1
        self.cursor.unread()
        return n

    def skip_line(self):
        while self.cursor.read() not in ("\n", EOF):
            pass

    # Every add_* handler gets the character that triggered it, reads whatever else it owns
    # from self.cursor and returns True if it stopped at the start of a line after a block.

    def add_char(self, ch : Char) -> bool:
        self.write_char(ch)
        return False

    def add_newline(self, ch : Char) -> bool:
        para = self.para
        if para.open:
            self.write("\n</p>")
            para.open = False
        if para.after_newline: # blank line
            nextc = self.cursor.peek()
            if nextc == EOF:
                return True
            if nextc == '[': # footnote definitions are not wrapped
                self.write("\n")
                return True
            if para.after_block:
                self.write("\n")
                para.after_block = False
            self.write('<p>')
            para.open = True
        self.write("\n")
        return True

    def add_header_or_pound(self, ch : Char) -> bool:
        if not (self.cursor.pos == 1 or self.para.after_newline):
            self.write('#')
            return False

        level = 1 + self.read_run('#')
        if self.cursor.peek() != ' ' or level > 6: # `#tag`, `#` at the end of input and so on
            self.write('#' * level)
            return False

        tag = 'h' + str(level)
        self.write('<' + tag + '>')
        while True:
            ch = self.cursor.read()
            if ch in ("\n", EOF):
                break
            self.write_char(ch)
        self.write('</' + tag + '>')
        self.para.after_block = True
        return True

    def add_emphasis(self, ch : Char) -> bool:
        count = 1 + self.read_run('*')
        if count > 3 or self.cursor.peek() == EOF:
            self.write('*' * count)
            return False

        opening, closing = EMPHASIS_TAGS[count]
        self.write(opening)
        while True:
            ch = self.cursor.read()
            if ch == EOF:
                break
            if ch == '*':
                run = 1 + self.read_run('*')
                if run == count:
                    break
                self.write('*' * run)
            else:
                self.write_char(ch)
        self.write(closing)
        return False

    def add_code(self, ch : Char) -> bool:
        count = 1 + self.read_run('`')
        if count == 2: # ``
            return False

        if count == 1:
            self.write('<code>')
            while True:
                ch = self.cursor.read()
                if ch in ('`', EOF):
                    break
                self.write_char(ch)
            self.write('</code>')
            return False

        self.skip_line() # language name
        self.write("<pre><code>\n")
        while True:
            ch = self.cursor.read()
            if ch == EOF:
                break
            if ch == '`':
                run = 1 + self.read_run('`')
                if run >= 3:
                    break
                self.write('`' * run)
            else:
                self.write(ch)
        self.write('</code></pre>')
        return False

    def add_list_or_dash(self, ch : Char) -> bool:
        if not self.para.after_newline:
            self.write_char(ch)
            return False

        self.write("<ul>\n<li>")
        item_open = True
        next_line = EOF # first character of the line that ended the list
        while True:
            ch = self.cursor.read()
            if ch == EOF:
                break
            if not item_open:
                if ch != '-': # blank line or some other block
                    next_line = ch
                    self.cursor.unread()
                    break
                self.write('<li>')
                item_open = True
            elif ch == "\n":
                self.write("</li>\n")
                item_open = False
            else:
                self.item_dispatch.get(ch, Converter.add_char)(self, ch)

        if item_open:
            self.write("</li>\n")
        self.write('</ul>')
        if next_line not in ("\n", EOF): # keep the line break that ended the last item
            self.write("\n")
        self.para.after_block = True
        return True

    def add_footnote(self, ch : Char) -> bool:
        if self.cursor.read() != '^':
            self.cursor.unread()
            self.write('[')
            return False

        digits = ''
        while True:
            ch = self.cursor.read()
            if not ('0' <= ch <= '9'):
                break
            digits += ch
        if ch != ']' or digits == '':
            self.cursor.unread()
            self.write('[^' + digits)
            return False

        # a definition with no earlier reference just takes the next free number
        n = self.footnotes.number(digits)
        if self.cursor.read() == ':':
            self.add_footnote_definition(n)
        else:
            self.cursor.unread()
            self.write('<a id="footnote-anchor-' + str(n) + '" href="#footnote-' + str(n) + '">[' + str(n) + ']</a>')
        return False

    def add_footnote_definition(self, n : int):
        self.write('<p id="footnote-' + str(n) + "\">\n"
                 + '<a href="#footnote-anchor-' + str(n) + '">[' + str(n) + "]</a>\n")
        while True:
            ch = self.cursor.read()
            if ch == EOF:
                self.write("\n</p>")
                return
            self.write_char(ch)
            if ch == "\n":
                break
        self.write("</p>\n")

    def add_table_row(self, tag : str):
        self.write('<' + tag + '>')
        while True:
            ch = self.cursor.read()
            if ch in ("\n", EOF): # row without the closing `|`
                self.write('</' + tag + ">\n")
                return
            if ch == '|':
                self.write('</' + tag + ">\n")
                if self.cursor.read() in ("\n", EOF):
                    return
                self.cursor.unread()
                self.write('<' + tag + '>')
            else:
                self.write_char(ch)

    def add_table(self, ch : Char) -> bool:
        self.write("<table class=\"table is-hoverable\">\n<thead>\n<tr>\n")
        self.add_table_row('th')
        self.write("</tr>\n</thead>\n")
        self.skip_line() # |--|--|

        self.write("<tbody>\n")
        while True:
            ch = self.cursor.read()
            if ch != '|':
                break
            self.write("<tr>\n")
            self.add_table_row('td')
            self.write("</tr>\n")
        self.cursor.unread()
        self.write("</tbody>\n</table>")
        if ch not in ("\n", EOF): # keep the line break that ended the last row
            self.write("\n")
        self.para.after_block = True
        return True

    def add_image(self, ch : Char) -> bool:
        start = self.cursor.pos
        if self.cursor.read() != '[' or self.cursor.read() != '[':
            self.cursor.pos = start
            self.write('!')
            return False

        name = ''
        while True:
            ch = self.cursor.read()
            if ch in ("\n", EOF): # not an embed after all
                self.cursor.pos = start
                self.write('!')
                return False
            if ch == ']' and self.cursor.peek() == ']':
                self.cursor.read()
                break
            if ch not in ('[', ']'):
                name += ch
        if self.cursor.read() != "\n":
            self.cursor.unread()

        self.write('<figure class="image">' + "\n"
                 + '<img src="' + self.image_dir + '/' + name + '">' + "\n"
                 + '</figure>')
        self.para.after_block = True
        return True

    dispatch : Dict[Char, Callable[['Converter', Char], bool]] = {
        "\n": add_newline,
        '#': add_header_or_pound,
        '*': add_emphasis,
        '-': add_list_or_dash,
        '`': add_code,
        '[': add_footnote,
        '|': add_table,
        '!': add_image,
    }

    item_dispatch : Dict[Char, Callable[['Converter', Char], bool]] = {
        '*': add_emphasis,
        '`': add_code,
        '[': add_footnote,
    }

def to_html(instr, outfilef : IO[str] = None, image_dir = DEFAULT_IMAGE_DIR):
    return Converter(image_dir).to_html(instr, outfilef)


if __name__ == '__main__':
    if len(sys.argv) < 4:
        print('Usage: obsidian_blog input-file output-file image-directory')
        sys.exit(0)

    try:
        args_infile = open(sys.argv[1], 'r', encoding = 'utf-8-sig', newline = '')
    except OSError:
        sys.exit("Can't open file '" + sys.argv[1] + "'")

    infile_str : str
    try:
        with args_infile:
            infile_str = args_infile.read()
    except UnicodeDecodeError:
        sys.exit('Input is not a valid UTF-8!')

    html = to_html(infile_str.replace("\r", ''), image_dir = sys.argv[3])

    try:
        args_outfile = open(sys.argv[2], 'w', encoding = 'utf-8', newline = "\n")
    except OSError:
        sys.exit("Can't open file '" + sys.argv[2] + "' for writing")

    with args_outfile:
        args_outfile.write(html)
    print('wrote ' + str(len(html.encode('utf-8'))) + ' bytes to file')
