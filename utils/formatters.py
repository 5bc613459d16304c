"""
Formatting helpers for the Suffah school document pipeline
Numbers in words, dates in words, 12-hour times and amounts
"""

import math
import re

ONES = ['', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine', 'Ten',
        'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen', 'Seventeen',
        'Eighteen', 'Nineteen']
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']

ORDINAL_WORDS = {
    1: 'First', 2: 'Second', 3: 'Third', 4: 'Fourth', 5: 'Fifth', 6: 'Sixth', 7: 'Seventh',
    8: 'Eighth', 9: 'Ninth', 10: 'Tenth', 11: 'Eleventh', 12: 'Twelfth', 13: 'Thirteenth',
    14: 'Fourteenth', 15: 'Fifteenth', 16: 'Sixteenth', 17: 'Seventeenth', 18: 'Eighteenth',
    19: 'Nineteenth', 20: 'Twentieth', 21: 'Twenty First', 22: 'Twenty Second',
    23: 'Twenty Third', 24: 'Twenty Fourth', 25: 'Twenty Fifth', 26: 'Twenty Sixth',
    27: 'Twenty Seventh', 28: 'Twenty Eighth', 29: 'Twenty Ninth', 30: 'Thirtieth',
    31: 'Thirty First',
}


def round_half_up(value):
    """Nearest integer, halves rounded up (72.5 -> 73)"""
    return int(math.floor(float(value) + 0.5))


def format_number(value):
    """Format number: whole numbers without decimals, fractional numbers with 2 decimal places."""
    try:
        if value is None:
            return None
        num = float(value)
        if num == int(num):
            return int(num)  # 32.0 -> 32
        else:
            return round(num, 2)  # 32.43 -> 32.43
    except (ValueError, TypeError):
        return value


def number_to_words(number):
    """Convert a non-negative whole number to English words ('Zero' for 0)"""
    number = int(number)
    if number == 0:
        return 'Zero'
    if number < 20:
        return ONES[number]
    if number < 100:
        return (TENS[number // 10] + ' ' + ONES[number % 10]).strip()
    if number < 1000:
        rest = number % 100
        words = ONES[number // 100] + ' Hundred'
        return words + (' ' + number_to_words(rest) if rest else '')
    for divisor, label in ((10 ** 9, 'Billion'), (10 ** 6, 'Million'), (1000, 'Thousand')):
        if number >= divisor:
            rest = number % divisor
            words = number_to_words(number // divisor) + ' ' + label
            return words + (' ' + number_to_words(rest) if rest else '')
    return str(number)


def marks_to_words(value):
    """Marks in words; fractional marks read the decimal digits ('Forty Two Point Five')"""
    number = float(value)
    whole = int(number)
    words = number_to_words(whole)
    if number != whole:
        digits = f'{number:.2f}'.split('.')[1].rstrip('0')
        words += ' Point ' + ' '.join(number_to_words(int(d)) for d in digits)
    return words


def date_to_words(value):
    """'Fifteenth March Two Thousand Ten' for 2010-03-15"""
    if value is None:
        return '-'
    return f"{ORDINAL_WORDS[value.day]} {value.strftime('%B')} {number_to_words(value.year)}"


def format_date(value, fmt='%d/%m/%Y'):
    """dd/mm/yyyy, or '-' when missing"""
    if value is None:
        return '-'
    return value.strftime(fmt)


def format_time(value):
    """Convert 'HH:MM' to a 12-hour label: '13:05' -> '1:05 PM'"""
    if not value:
        return '-'
    match = re.match(r'^\s*(\d{1,2}):(\d{2})', str(value))
    if not match:
        return str(value)
    hours, minutes = int(match.group(1)), match.group(2)
    suffix = 'PM' if hours >= 12 else 'AM'
    display = hours % 12 or 12
    return f'{display}:{minutes} {suffix}'


def format_amount(value, currency='PKR'):
    """'PKR 12,500' with thousands separators; two decimals only when needed"""
    number = float(value or 0)
    if number == int(number):
        text = f'{int(number):,}'
    else:
        text = f'{number:,.2f}'
    return f'{currency} {text}' if currency else text


def display(value, placeholder='-'):
    """Placeholder for missing optional text fields"""
    if value is None:
        return placeholder
    text = str(value).strip()
    return text if text else placeholder


def initials(name, limit=2):
    """'The Suffah Public School' -> 'SP' (skips short filler words)"""
    words = [w for w in re.split(r'\s+', str(name or '').strip()) if w]
    significant = [w for w in words if w.lower() not in ('the', 'of', 'and', '&')] or words
    return ''.join(w[0].upper() for w in significant[:limit])
