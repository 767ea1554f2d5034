import os
import sys
import json

import fretbar.fbmisc as fbmisc
import fretbar.fbutil as fbutil

if __name__ == "__main__":

    outfile_name = "runfolder_output.json"

    os.makedirs(fbmisc.OUTPUTPATH, exist_ok=True)
    outfile = fbmisc.OUTPUTPATH / outfile_name

    book = {}

    charts_root = sys.argv[1]
    charts, errors = fbutil.discover_charts([charts_root])

    print(f"\nFound {len(charts)} charts in '{charts_root}'.\n")
    for e in errors:
        print(f"\t{e}")

    songs_count = 0
    for chartfile, inifile, dirname, subfolders in charts:
        print(f"{chartfile}")

        try:
            song = fbutil.load_chart(chartfile, inifile)
        except fbmisc.ChartFileError as e:
            print(f"\tSkipping: {e}")
            continue

        book[fbutil.chart_hash(chartfile)] = {
            'path': dirname,
            'folder': subfolders,
            'song': song,
        }
        songs_count += 1

    with open(outfile, mode='w', encoding='utf-8') as output_json:
        json.dump(book, output_json, default=fbutil.json_save, separators=(',', ':'))

    print(f"\nFinished saving {songs_count} songs to {outfile_name}")
