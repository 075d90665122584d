from bingo import create_app, SESSION_EXTENSION

app = create_app()
 
if __name__ == '__main__':
    try:
        app.run(debug=True, threaded=True)
    finally:
        app.extensions[SESSION_EXTENSION].close()
