"""
Manual test client for the collaboration channel.

    python -m sheetsync.client --token <access token> --sheet 7 --cell B3 --content hello
"""
import argparse
import re

import socketio

SERVER_URL = 'http://localhost:8000'


def build_client(token: str, sheet_id: int, edit=None) -> socketio.Client:
    sio = socketio.Client()

    @sio.on('authReq')
    def auth_req():
        print("Server asked for credentials")
        # The return value is sent back as the acknowledgement
        return {'token': token, 'sheetID': sheet_id}

    @sio.on('authOk')
    def auth_ok():
        print(f"Joined sheet {sheet_id}")
        if edit is not None:
            sio.emit('writeCell', edit)

    @sio.on('authFail')
    def auth_fail():
        print("Authentication refused")

    @sio.on('writeCell')
    def write_cell(data):
        print(f"{data['column']}{data['line']} <- {data['content']!r}")

    @sio.event
    def disconnect():
        print("Disconnected from server")

    return sio


def parse_cell(cell: str):
    match = re.fullmatch(r'([A-Za-z]+)(\d+)', cell)
    if match is None:
        raise argparse.ArgumentTypeError(f"invalid cell reference: {cell}")
    return match.group(1).upper(), int(match.group(2))


def main():
    parser = argparse.ArgumentParser(description="SheetSync socket test client")
    parser.add_argument('--url', default=SERVER_URL)
    parser.add_argument('--token', required=True)
    parser.add_argument('--sheet', type=int, required=True)
    parser.add_argument('--cell', type=parse_cell)
    parser.add_argument('--content', default='')
    args = parser.parse_args()

    edit = None
    if args.cell is not None:
        column, line = args.cell
        edit = {'line': line, 'column': column, 'content': args.content}

    sio = build_client(args.token, args.sheet, edit)
    sio.connect(args.url)
    sio.wait()


if __name__ == '__main__':
    main()
